"""Tests for affect_fusion.ssml.

Covers:
- <speak>/<prosody> structure and percentage attributes
- Azure express-as wrapper
- Escaping of markup characters in text
- Empty text rejection
- Unknown vendor warning
"""

from __future__ import annotations

from lxml import etree
import pytest

from affect_fusion.exceptions import InputError
from affect_fusion.models import StyleTag, VoiceRenderParams
from affect_fusion.ssml import MSTTS_NS, SSML_NS, SSMLRenderer

CRISIS_PARAMS = VoiceRenderParams("nova", 0.75, 0.9, 0.85, StyleTag.COMFORTING)
NEUTRAL_PARAMS = VoiceRenderParams("nova", 1.0, 1.0, 1.0, StyleTag.NEUTRAL)


@pytest.fixture()
def renderer() -> SSMLRenderer:
    return SSMLRenderer()


def _parse_ssml(ssml: str) -> etree._Element:
    return etree.fromstring(ssml.encode("utf-8"))


class TestStandard:
    def test_structure(self, renderer: SSMLRenderer) -> None:
        root = _parse_ssml(renderer.render("I'm here with you.", CRISIS_PARAMS))
        assert root.tag == f"{{{SSML_NS}}}speak"
        assert root.get("version") == "1.0"
        assert root.get("{http://www.w3.org/XML/1998/namespace}lang") == "en-US"
        (prosody,) = list(root)
        assert prosody.tag == f"{{{SSML_NS}}}prosody"
        assert prosody.text == "I'm here with you."

    def test_percentages(self, renderer: SSMLRenderer) -> None:
        prosody = _parse_ssml(renderer.render("Hello", CRISIS_PARAMS))[0]
        assert prosody.get("rate") == "75%"
        assert prosody.get("pitch") == "-10%"
        assert prosody.get("volume") == "-15%"

    def test_neutral_params(self, renderer: SSMLRenderer) -> None:
        prosody = _parse_ssml(renderer.render("Hello", NEUTRAL_PARAMS))[0]
        assert (prosody.get("rate"), prosody.get("pitch"), prosody.get("volume")) == (
            "100%",
            "+0%",
            "+0%",
        )

    def test_no_vendor_extension(self, renderer: SSMLRenderer) -> None:
        assert "express-as" not in renderer.render("Hello", CRISIS_PARAMS)

    def test_markup_is_escaped(self, renderer: SSMLRenderer) -> None:
        ssml = renderer.render("a < b & c", NEUTRAL_PARAMS)
        assert "&lt;" in ssml and "&amp;" in ssml
        assert _parse_ssml(ssml)[0].text == "a < b & c"

    def test_language(self) -> None:
        root = _parse_ssml(SSMLRenderer(language="fr-FR").render("Salut", NEUTRAL_PARAMS))
        assert root.get("{http://www.w3.org/XML/1998/namespace}lang") == "fr-FR"

    @pytest.mark.parametrize("text", ["", "   "])
    def test_empty_text(self, renderer: SSMLRenderer, text: str) -> None:
        with pytest.raises(InputError):
            renderer.render(text, NEUTRAL_PARAMS)


class TestAzure:
    def test_express_as_wrapper(self) -> None:
        root = _parse_ssml(SSMLRenderer(vendor="azure").render("Breathe with me.", CRISIS_PARAMS))
        (express,) = list(root)
        assert express.tag == f"{{{MSTTS_NS}}}express-as"
        assert express.get("style") == "empathetic"
        assert express[0].tag == f"{{{SSML_NS}}}prosody"

    def test_neutral_style_has_no_wrapper(self) -> None:
        root = _parse_ssml(SSMLRenderer(vendor="Azure").render("Hi", NEUTRAL_PARAMS))
        assert root[0].tag == f"{{{SSML_NS}}}prosody"


class TestVendors:
    def test_unknown_vendor_warns(self) -> None:
        with pytest.warns(UserWarning, match="not implemented"):
            renderer = SSMLRenderer(vendor="acme")
        assert "express-as" not in renderer.render("Hi", CRISIS_PARAMS)
