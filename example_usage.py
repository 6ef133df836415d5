"""
Example usage of md-zapper.

This demonstrates driving the picker programmatically: enabling it,
hovering and clicking elements, and pulling the markdown out through the
command router.
"""

import asyncio

from md_zapper.converters.cleanup import cleanup_markdown
from md_zapper.core.document_model import HostDocument
from md_zapper.picker.collaborators import MemorySettingsStore, NullOverlay
from md_zapper.picker.commands import CommandRouter
from md_zapper.picker.state_machine import Click, KeyDown, Picker, PointerMove


EXAMPLE_PAGE = """
<html>
  <body>
    <nav>Home | Docs | Blog</nav>
    <main class="page-content">
      <h1>Installing the tool</h1>
      <p>Grab the package from the
         <a href="/downloads/">downloads page</a>.</p>
      <pre><code class="language-bash">pip install md-zapper</code></pre>
      <img src="data:image/png;base64,iVBORw0KGgo=" alt="spinner">
      <ul><li>Fast</li><li>Portable</li></ul>
    </main>
  </body>
</html>
"""


class PrintingClipboard:
    """Clipboard sink that just prints what it receives."""

    async def write_text(self, text: str) -> None:
        print("--- clipboard ---")
        print(text, end="")
        print("-----------------")


async def example_picking():
    """Hover, select and convert a couple of elements."""

    document = HostDocument.from_html(EXAMPLE_PAGE, location="https://example.com/docs/install.html")
    picker = Picker(document, MemorySettingsStore(cleanup_enabled=True), PrintingClipboard(), NullOverlay())
    router = CommandRouter(picker)

    print(await router.handle({"type": "TOGGLE_ZAP"}))

    # Point at the heading, then click it
    heading = document.query_selector("h1")
    await document.dispatch_event(PointerMove(heading))
    await document.dispatch_event(Click(heading))
    print(f"✓ Selected {heading.describe()}")

    # Shift-click the code block to add it
    code_block = document.query_selector("pre")
    await document.dispatch_event(PointerMove(code_block))
    await document.dispatch_event(Click(code_block, shift=True))
    print(f"✓ Added {code_block.describe()}")

    print("\n=== GET_MD ===")
    print((await router.handle({"type": "GET_MD"}))["md"])

    # Alt-hover the link widens to the content container
    link = document.query_selector("a")
    await document.dispatch_event(PointerMove(link, alt=True))
    print(f"Alt-hover over the link lands on {picker.hover.describe()}")

    # Enter replaces the selection with the container, Ctrl+C copies and clears
    await document.dispatch_event(KeyDown("Enter"))
    await document.dispatch_event(KeyDown("c", ctrl=True))
    print(f"Selection after copy: {len(picker.selection)} element(s)")

    await document.dispatch_event(KeyDown("Escape"))
    print(f"Picker state: {picker.state.value}")


def example_cleanup():
    """Run the cleanup pipeline on its own."""

    print("\n=== Cleanup Example ===")
    raw = "- one\n\n- two\n\n\n\nA soft\n\nwrapped paragraph   \n\n```\nkept   \n\n\n```"
    print(cleanup_markdown(raw))


if __name__ == "__main__":
    print("md-zapper Example")
    print("=================")

    asyncio.run(example_picking())
    example_cleanup()

    print("To pick from a file on disk:")
    print("  md-zapper convert page.html -s 'main' --base-url https://example.com/")
    print("  md-zapper interactive page.html")
