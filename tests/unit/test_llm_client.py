import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from lunchmenus.core.config import settings
from lunchmenus.llm import client as llm_client


def _model(*texts):
    """Gemini model stub whose generate_content_async yields the given texts or errors in order"""
    model = MagicMock()
    side_effect = [t if isinstance(t, Exception) else MagicMock(text=t) for t in texts]
    model.generate_content_async = AsyncMock(side_effect=side_effect)
    return model


class TestDecodeJson:

    def test_strips_code_fences(self):
        assert llm_client._decode_json('```json\n{"parsed_menu": "Keitto"}\n```') == {"parsed_menu": "Keitto"}

    def test_finds_embedded_object(self):
        assert llm_client._decode_json('Here you go: {"success": true} thanks') == {"success": True}

    def test_rejects_non_json(self):
        with pytest.raises(ValueError):
            llm_client._decode_json("no json here")


class TestExtractDayMenu:

    @patch('lunchmenus.llm.client.get_gemini_model')
    def test_success(self, mock_model):
        mock_model.return_value = _model(
            '```json\n{"success": true, "target_day_menu": ["Keitto (L)", "Pihvi", "Salaatti"], "error": null}\n```'
        )

        result = asyncio.run(llm_client.extract_day_menu("<p>menu</p>", "Factory", "Tiistai", "fi"))

        assert result.success is True
        assert result.target_day_menu == ["Keitto (L)", "Pihvi", "Salaatti"]

    @patch('lunchmenus.llm.client.get_gemini_model')
    def test_camel_case_key(self, mock_model):
        mock_model.return_value = _model('{"success": true, "targetDayMenu": ["Keitto"]}')

        result = asyncio.run(llm_client.extract_day_menu("<p>menu</p>", "Factory", "Tiistai", "fi"))

        assert result.target_day_menu == ["Keitto"]

    @patch('lunchmenus.llm.client.get_gemini_model')
    def test_malformed_output_is_a_failure(self, mock_model):
        mock_model.return_value = _model("I could not find a menu")

        result = asyncio.run(llm_client.extract_day_menu("<p>menu</p>", "Factory", "Tiistai", "fi"))

        assert result.success is False
        assert result.target_day_menu == []
        assert result.error

    @patch('lunchmenus.llm.client.asyncio.sleep', new_callable=AsyncMock)
    @patch('lunchmenus.llm.client.get_gemini_model')
    def test_transient_error_retries_with_smaller_input(self, mock_model, mock_sleep):
        model = _model(Exception("504 Deadline Exceeded"), '{"success": true, "target_day_menu": ["A"]}')
        mock_model.return_value = model
        html = "x" * 30000

        result = asyncio.run(llm_client.extract_day_menu(html, "Factory", "Tiistai", "fi"))

        assert result.success is True
        assert model.generate_content_async.await_count == 2
        first_prompt = model.generate_content_async.await_args_list[0].args[0]
        second_prompt = model.generate_content_async.await_args_list[1].args[0]
        assert len(second_prompt) < len(first_prompt)
        mock_sleep.assert_awaited_once()

    @patch('lunchmenus.llm.client.get_gemini_model')
    def test_non_transient_error_is_not_retried(self, mock_model):
        model = _model(Exception("API key invalid"))
        mock_model.return_value = model

        result = asyncio.run(llm_client.extract_day_menu("<p>menu</p>", "Factory", "Tiistai", "fi"))

        assert result.success is False
        assert "API key invalid" in result.error
        assert model.generate_content_async.await_count == 1

    def test_missing_api_key(self):
        with patch.object(settings, "GOOGLE_API_KEY", None):
            result = asyncio.run(llm_client.extract_day_menu("<p>menu</p>", "Factory", "Tiistai", "fi"))

        assert result.success is False
        assert "GOOGLE_API_KEY" in result.error

    def test_mock_mode_reads_lines_under_day_heading(self):
        html = (
            "<h3>Maanantai</h3><p>Broileria</p>"
            "<h3>Tiistai</h3><p>Keitto</p><p>Pihvi</p>"
            "<h3>Keskiviikko</h3><p>Kala</p>"
        )
        with patch.object(settings, "USE_MOCK", True):
            result = asyncio.run(llm_client.extract_day_menu(html, "Factory", "Tiistai", "fi"))

        assert result.success is True
        assert result.target_day_menu == ["Keitto", "Pihvi"]


class TestParseMenu:

    @patch('lunchmenus.llm.client.get_gemini_model')
    def test_success(self, mock_model):
        mock_model.return_value = _model('{"parsed_menu": "Keitto\\nPihvi"}')

        result = asyncio.run(llm_client.parse_menu("<b>Keitto</b> Pihvi", "POR"))

        assert result.parsed_menu == "Keitto\nPihvi"

    @patch('lunchmenus.llm.client.get_gemini_model')
    def test_failure_falls_back_to_input(self, mock_model):
        mock_model.return_value = _model(Exception("quota exceeded"))

        result = asyncio.run(llm_client.parse_menu("raw menu text", "POR"))

        assert result.parsed_menu == "raw menu text"

    @patch('lunchmenus.llm.client.get_gemini_model')
    def test_empty_output_falls_back_to_input(self, mock_model):
        mock_model.return_value = _model('{"parsed_menu": "  "}')

        result = asyncio.run(llm_client.parse_menu("raw menu text", "POR"))

        assert result.parsed_menu == "raw menu text"


class TestTranslateMenu:

    @patch('lunchmenus.llm.client.get_gemini_model')
    def test_success(self, mock_model):
        mock_model.return_value = _model(
            '{"success": true, "translated_menu": "--- Tuesday ---\\nVegetable soup (L, G)", "error": null}'
        )

        result = asyncio.run(llm_client.translate_menu("--- Tiistai ---\nKasviskeitto (L, G)", "Valimo Park"))

        assert result.success is True
        assert result.translated_menu == "--- Tuesday ---\nVegetable soup (L, G)"

    @patch('lunchmenus.llm.client.get_gemini_model')
    def test_empty_translation_is_a_failure(self, mock_model):
        mock_model.return_value = _model('{"success": true, "translated_menu": ""}')

        result = asyncio.run(llm_client.translate_menu("Kasviskeitto", "Valimo Park"))

        assert result.success is False

    def test_mock_mode_translates_weekdays(self):
        with patch.object(settings, "USE_MOCK", True):
            result = asyncio.run(llm_client.translate_menu("--- Tiistai ---\nKeitto", "Valimo Park"))

        assert result.translated_menu == "--- Tuesday ---\nKeitto"
