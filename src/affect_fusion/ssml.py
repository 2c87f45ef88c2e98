"""SSMLRenderer -- wrap response text in SSML prosody for TTS engines.

Maps :class:`VoiceRenderParams` to SSML attributes:

  param      SSML                 example
  ────────   ──────────────────   ─────────
  speed      prosody rate         ``75%``  (multiplier of default rate)
  pitch      prosody pitch        ``-10%`` (relative change)
  volume     prosody volume       ``-15%`` (relative change)
  style_tag  mstts:express-as     ``empathetic`` (``azure`` vendor only)
"""

from __future__ import annotations

import warnings

from lxml import etree

from .exceptions import InputError
from .models import StyleTag, VoiceRenderParams

SSML_NS = "http://www.w3.org/2001/10/synthesis"
MSTTS_NS = "http://www.w3.org/2001/mstts"
XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"

SUPPORTED_VENDORS = frozenset({"azure"})

# StyleTag -> Azure express-as style; tags without an entry get no wrapper.
AZURE_STYLES: dict[StyleTag, str] = {
    StyleTag.COMFORTING: "empathetic",
    StyleTag.CALM: "calm",
    StyleTag.GENTLE: "gentle",
    StyleTag.EXCITED: "excited",
    StyleTag.HAPPY: "cheerful",
    StyleTag.WARM: "friendly",
    StyleTag.SARCASTIC: "unfriendly",
    StyleTag.CONTEMPLATIVE: "serious",
}


def _rate(multiplier: float) -> str:
    return f"{round(multiplier * 100)}%"


def _relative(multiplier: float) -> str:
    return f"{round((multiplier - 1.0) * 100):+d}%"


class SSMLRenderer:
    """Render text with voice parameters as an SSML document.

    Parameters
    ----------
    vendor:
        Optional TTS vendor hint. ``"azure"`` adds an
        ``<mstts:express-as>`` style wrapper; other vendors get standard
        SSML 1.0.
    language:
        Value of the ``xml:lang`` attribute on ``<speak>``.
    """

    def __init__(self, vendor: str | None = None, language: str = "en-US") -> None:
        self.vendor = vendor.lower() if vendor else None
        self.language = language
        if self.vendor is not None and self.vendor not in SUPPORTED_VENDORS:
            warnings.warn(
                f"Vendor-specific SSML adaptation for {vendor!r} is not "
                f"implemented. Output will use standard SSML 1.0 without "
                f"vendor extensions.",
                stacklevel=2,
            )

    def render(self, text: str, params: VoiceRenderParams) -> str:
        """Return an SSML string speaking *text* with *params*.

        Raises
        ------
        InputError
            If *text* is empty or whitespace only.
        """
        if not text or not text.strip():
            raise InputError("Cannot render SSML for empty text")

        nsmap = {None: SSML_NS}
        style = AZURE_STYLES.get(params.style_tag) if self.vendor == "azure" else None
        if style is not None:
            nsmap["mstts"] = MSTTS_NS

        speak = etree.Element(f"{{{SSML_NS}}}speak", nsmap=nsmap)
        speak.set("version", "1.0")
        speak.set(XML_LANG, self.language)

        parent = speak
        if style is not None:
            parent = etree.SubElement(speak, f"{{{MSTTS_NS}}}express-as")
            parent.set("style", style)

        prosody = etree.SubElement(parent, f"{{{SSML_NS}}}prosody")
        prosody.set("rate", _rate(params.speed))
        prosody.set("pitch", _relative(params.pitch))
        prosody.set("volume", _relative(params.volume))
        prosody.text = text.strip()

        return etree.tostring(speak, encoding="unicode")
