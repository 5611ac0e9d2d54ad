from mdgate.templates import PageTemplate


def test_page_template_composes_fragments():
    template = PageTemplate("Orb docs")
    html = template.render(
        "/install",
        "<h1>Install</h1>",
        nav_html='<details data-path="/concepts"></details>',
        footer_html="<ul><li>GitHub</li></ul>",
    )
    assert html.startswith("<!DOCTYPE html>")
    assert 'data-path="/install"' in html
    assert "<title>Orb docs</title>" in html
    assert '<main class="markdown-body">\n<h1>Install</h1>\n</main>' in html
    assert '<details data-path="/concepts"></details>' in html
    assert "<footer role=contentinfo><ul><li>GitHub</li></ul></footer>" in html


def test_page_template_strips_quotes_from_path():
    html = PageTemplate("Orb").render('/x"onload="y', "")
    assert 'data-path="/xonload=y"' in html


def test_page_template_escapes_title():
    html = PageTemplate("<Orb>").render("/", "")
    assert "<title>&lt;Orb&gt;</title>" in html


def test_page_template_includes_pygments_css():
    html = PageTemplate("Orb").render("/", "")
    assert ".highlight" in html


def test_custom_template_dir_overrides_default(tmp_path):
    (tmp_path / "page.html").write_text("<p data-path={{ data_path }}>{{ body }}</p>", encoding="utf-8")
    html = PageTemplate("Orb", template_dir=tmp_path).render("/run/elixir", "<b>x</b>")
    assert html == "<p data-path=/run/elixir><b>x</b></p>"
