from lunchmenus.scrapers import segment


WEEKLY = "--- Tiistai ---\nKeitto\nPihvi\n--- Keskiviikko ---\nKala\nRiisi\n"


class TestDayBlocks:

    def test_blocks_run_to_next_marker(self):
        blocks = segment.slice_day_blocks(WEEKLY)

        assert [(b.day_fi, b.language) for b in blocks] == [("Tiistai", "fi"), ("Keskiviikko", "fi")]
        assert segment.select_block(blocks, "Tiistai").body == "Keitto\nPihvi"
        assert segment.select_block(blocks, "Keskiviikko").body == "Kala\nRiisi"

    def test_missing_day(self):
        blocks = segment.slice_day_blocks(WEEKLY)
        assert segment.select_block(blocks, "Perjantai") is None
        assert segment.available_days(blocks) == ["Tiistai", "Keskiviikko"]

    def test_dated_headings_and_noise_lines(self):
        text = (
            "Viikko 35\n"
            "Tiistai 26.8.\n"
            "Keitto (L,G)\n"
            "(L = laktoositon, G = gluteeniton)\n"
            "Hinnat 12,50 €\n"
            "Keskiviikko 27.8.:\n"
            "Kalakeitto (L)\n"
        )
        blocks = segment.slice_day_blocks(text)

        assert segment.select_block(blocks, "Tiistai").body == "Keitto (L,G)"
        assert segment.select_block(blocks, "Keskiviikko").body == "Kalakeitto (L)"

    def test_dish_line_starting_with_codes_is_kept(self):
        text = "Tiistai\nKeitto\n(L, G) Broileria ja riisiä\n(L, G)\n(VL = vähälaktoosinen)\n"
        blocks = segment.slice_day_blocks(text)

        assert segment.select_block(blocks, "Tiistai").body == "Keitto\n(L, G) Broileria ja riisiä"

    def test_language_filter(self):
        text = "Tiistai\nKeitto\nTuesday\nSoup\n"
        blocks = segment.slice_day_blocks(text)

        assert segment.select_block(blocks, "Tiistai", "fi").body == "Keitto"
        assert segment.select_block(blocks, "Tiistai", "en").body == "Soup"

    def test_markers_are_ordered(self):
        markers = segment.find_day_markers("Monday x Tiistai y")
        assert [(m.day_fi, m.language) for m in markers] == [("Maanantai", "en"), ("Tiistai", "fi")]
        assert markers[0].pos < markers[1].pos

    def test_noise_lines(self):
        assert segment.is_noise_line("(G = gluteeniton)")
        assert segment.is_noise_line("Prices 12,90 €")
        assert segment.is_noise_line("Pahoittelemme vesivahinkoa")
        assert segment.is_noise_line("---")
        assert not segment.is_noise_line("Gluteeniton leipä (G)")


class TestExtractDaySection:

    def test_section_with_header(self):
        assert segment.extract_day_section(WEEKLY, "Tiistai", "fi") == "--- Tiistai ---\nKeitto\nPihvi"

    def test_english_section(self):
        weekly = (
            "--- Tiistai ---\nKeitto\n--- Keskiviikko ---\nKala\n"
            "--- Tuesday ---\nSoup\n--- Wednesday ---\nFish\n"
        )
        assert segment.extract_day_section(weekly, "Tiistai", "en") == "--- Tuesday ---\nSoup"
        assert segment.extract_day_section(weekly, "Tiistai", "fi") == "--- Tiistai ---\nKeitto"

    def test_absent_day(self):
        assert segment.extract_day_section(WEEKLY, "Perjantai", "fi") == ""
        assert segment.extract_day_section(WEEKLY, "Tiistai", "en") == ""

    def test_format_block(self):
        assert segment.format_block("Tuesday", "Soup") == "--- Tuesday ---\nSoup"
