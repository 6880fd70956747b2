from lunchmenus.fetch.html_analyzer import (
    has_spa_markers,
    narrow_region,
    scope_content,
    visible_text,
)


class TestHtmlAnalyzer:
    """Unit tests for page narrowing before parsing or model extraction"""

    def test_spa_markers(self):
        assert has_spa_markers('<div id="__next"></div>')
        assert has_spa_markers('<script>window.__NUXT__={}</script>')
        assert not has_spa_markers("<p>Keitto</p>")

    def test_visible_text_skips_scripts(self):
        html = "<html><head><title>T</title></head><body><script>var x=1;</script><p>Keitto</p></body></html>"
        assert visible_text(html) == "Keitto"

    def test_scope_content_prefers_main(self):
        html = "<body><nav>Menu link</nav><main><h3>Tiistai 26.8.</h3></main></body>"
        scoped = scope_content(html)
        assert "Tiistai" in scoped
        assert "Menu link" not in scoped

    def test_scope_content_wordpress_div(self):
        html = '<body><div class="entry-content"><p>Lounas</p></div></body>'
        assert scope_content(html) == "<p>Lounas</p>"

    def test_scope_content_none(self):
        assert scope_content("<p>Just a paragraph</p>") is None

    def test_narrow_region_uses_large_region(self):
        items = "".join(f"<p>Annos {i}</p>" for i in range(50))
        html = f'<body><header>Nav</header><div class="lounaslista">{items}</div></body>'

        content = narrow_region(html, 'div[class*="lounaslista"]', min_chars=100)

        assert "Annos 49" in content
        assert "Nav" not in content

    def test_narrow_region_widens_small_region(self):
        html = '<body><header>Nav</header><div id="Lounas"><p>Tiny</p></div></body>'

        content = narrow_region(html, "#Lounas", min_chars=5000)

        assert "Nav" in content
        assert "Tiny" in content

    def test_narrow_region_missing_selector(self):
        html = "<body><p>Keitto</p></body>"
        assert "Keitto" in narrow_region(html, "#Lounas", min_chars=10)

    def test_narrow_region_truncates(self):
        html = "<body>" + "x" * 500 + "</body>"
        assert len(narrow_region(html, "body", min_chars=0, max_chars=100)) == 100

    def test_narrow_region_drops_scripts(self):
        html = "<body><script>track()</script><p>Keitto</p></body>"
        assert "track" not in narrow_region(html, "body", min_chars=0)
