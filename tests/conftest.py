"""
Shared fixtures for md-zapper tests.
"""

from typing import List

import pytest

from md_zapper.core.document_model import HostDocument
from md_zapper.picker.collaborators import ClipboardError, MemorySettingsStore, NullOverlay
from md_zapper.picker.state_machine import Picker

PAGE_URL = "https://example.com/guide/index.html"

SAMPLE_PAGE = """
<html>
  <head><title>Guide</title><style>p { color: red }</style></head>
  <body>
    <div id="wrapper">
      <article id="post">
        <h2 id="title">Getting started</h2>
        <p id="first">First paragraph with <a href="docs/setup.html" title="Setup">the setup docs</a>.</p>
        <div class="inner"><span id="leaf">deep text</span></div>
        <pre id="snippet"><code class="language-js">const x=1;</code></pre>
        <p id="second">Second paragraph.</p>
      </article>
      <div id="hidden-box" style="display:none"><p id="hidden-text">secret</p></div>
      <div id="toolbar" data-zap-ignore="true"><button id="tool-button">Zap</button></div>
    </div>
  </body>
</html>
"""


class FakeClipboard:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.writes: List[str] = []

    async def write_text(self, text: str) -> None:
        if self.fail:
            raise ClipboardError("denied")
        self.writes.append(text)


@pytest.fixture
def document() -> HostDocument:
    return HostDocument.from_html(SAMPLE_PAGE, location=PAGE_URL)


@pytest.fixture
def settings() -> MemorySettingsStore:
    return MemorySettingsStore(cleanup_enabled=True)


@pytest.fixture
def clipboard() -> FakeClipboard:
    return FakeClipboard()


@pytest.fixture
def failing_clipboard() -> FakeClipboard:
    return FakeClipboard(fail=True)


@pytest.fixture
def overlay() -> NullOverlay:
    return NullOverlay()


@pytest.fixture
def picker(document, settings, clipboard, overlay) -> Picker:
    return Picker(document, settings, clipboard, overlay)
