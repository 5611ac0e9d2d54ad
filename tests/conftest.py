import asyncio

import pytest
from aiohttp.test_utils import TestClient, TestServer

from mdgate.config import load_config
from mdgate.errors import ContentUnavailable
from mdgate.server import create_app

SHA = "3f5e9c1d2b4a69788a7e0c6d5b4a3f2e1d0c9b8a"

NAV_MD = """<details data-path="/concepts" onclick="steal()">
<summary>Concepts</summary>

- [Strings](/concepts/strings)

</details>
"""

FILES = {
    "site/readme.md": b"# Orb\n\nWrite WebAssembly with Elixir.\n",
    "site/404.md": b"# Not found\n\nThis page does not exist.\n",
    "site/_nav.md": NAV_MD.encode(),
    "site/_footer.md": b"- [GitHub](https://github.com/RoyalIcing/Orb)\n",
    "site/install.md": b"# Install\n\n```elixir\n{:orb, \"~> 0.1\"}\n```\n",
    "site/concepts/strings.md": b"# Strings\n\n<div class=\"note\">Raw HTML</div>\n",
    "site/silverorb/silverorb.md": b"# SilverOrb\n",
    "examples/hello.wasm": b"\x00asm\x01\x00\x00\x00",
}


def pkt(line: str) -> bytes:
    data = line.encode("utf-8")
    return f"{len(data) + 4:04x}".encode("ascii") + data


def advertisement(sha: str = SHA, branch: str = "main") -> bytes:
    return (
        pkt("# service=git-upload-pack\n")
        + b"0000"
        + pkt(f"{sha} HEAD\0multi_ack side-band-64k symref=HEAD:refs/heads/{branch} agent=git/github\n")
        + pkt(f"{sha} refs/heads/{branch}\n")
        + pkt(f"{'1' * 40} refs/tags/v0.1.0\n")
        + b"0000"
    )


class FakeSource:
    """In-memory ContentSource that records every fetch."""

    def __init__(self, files=None, refs=None):
        self.files = dict(FILES if files is None else files)
        self.refs = advertisement() if refs is None else refs
        self.calls = []
        self.ref_calls = 0
        self.gate = None
        self.closed = False

    async def fetch_refs(self) -> bytes:
        self.ref_calls += 1
        if self.refs is False:
            raise ContentUnavailable("info/refs", "content source responded with HTTP 503", status=503)
        return self.refs

    async def fetch_file(self, revision: str, path: str) -> bytes:
        self.calls.append((revision, path))
        if self.gate is not None:
            await self.gate.wait()
        if path not in self.files:
            raise ContentUnavailable(path, "content source responded with HTTP 404", status=404)
        return self.files[path]

    def fetched(self, path: str) -> int:
        return sum(1 for _, p in self.calls if p == path)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def config(tmp_path):
    return load_config(tmp_path)


@pytest.fixture
def serve(config):
    """Run ``scenario(client, app)`` against an app backed by ``source``."""

    def _serve(source, scenario, **overrides):
        cfg = dict(config, **overrides)

        async def run():
            app = create_app(cfg, source=source)
            async with TestClient(TestServer(app)) as client:
                return await scenario(client, app)

        return asyncio.run(run())

    return _serve


@pytest.fixture
def make_source():
    return FakeSource


@pytest.fixture
def sha():
    return SHA


@pytest.fixture
def advertise():
    return advertisement
