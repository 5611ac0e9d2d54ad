import pytest

from mdgate.routes import DEFAULT_ROUTES, RouteTable


def test_root_maps_to_readme():
    assert RouteTable().route_for("/") == "readme"


@pytest.mark.parametrize(
    "path",
    [
        "/install",
        "/concepts/core-webassembly",
        "/concepts/elixir-compiler",
        "/concepts/strings",
        "/concepts/composable-modules",
        "/concepts/custom-types",
        "/concepts/platform-agnostic",
        "/run/elixir",
        "/run/javascript",
        "/silverorb/parse",
        "/silverorb/format",
    ],
)
def test_nested_paths_map_to_themselves(path):
    assert RouteTable().route_for(path) == path[1:]


def test_silverorb_is_an_alias():
    assert RouteTable().route_for("/silverorb") == "silverorb/silverorb"


@pytest.mark.parametrize(
    "path",
    ["/does-not-exist", "/install/", "/concepts", "install", "", "//install", "/INSTALL", None],
)
def test_unknown_or_malformed_paths_are_absent(path):
    assert RouteTable().route_for(path) is None


def test_every_default_route_has_a_distinct_content_path():
    logical = list(DEFAULT_ROUTES.values())
    assert len(logical) == len(set(logical))
    assert len(RouteTable()) == len(DEFAULT_ROUTES)


def test_overrides_add_and_replace_routes():
    table = RouteTable(overrides={"/changelog": "changelog", "/install": "setup/install"})
    assert table.route_for("/changelog") == "changelog"
    assert table.route_for("/install") == "setup/install"
    assert "/changelog" in table


@pytest.mark.parametrize(
    "overrides",
    [
        {"changelog": "changelog"},
        {"/changelog": "/changelog"},
        {"/changelog": "../secrets"},
        {"/changelog": ""},
        {"/readme": "readme"},
    ],
)
def test_invalid_overrides_are_rejected(overrides):
    with pytest.raises(ValueError):
        RouteTable(overrides=overrides)


def test_from_config_reads_routes_section():
    table = RouteTable.from_config({"routes": {"/faq": "faq"}})
    assert table.route_for("/faq") == "faq"


def test_iteration_is_sorted():
    table = RouteTable(routes={"/b": "b", "/a": "a"})
    assert list(table) == [("/a", "a"), ("/b", "b")]
