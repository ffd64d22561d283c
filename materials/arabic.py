# materials/arabic.py
import re
import unicodedata

# Arabic block, U+0600..U+06FF
ARABIC_CHAR_RE = re.compile(r"[\u0600-\u06FF]")
ARABIC_MIN_RATIO = 0.30

# Zero-width marks, LRM/RLM, bidi embeddings/overrides/isolates and the BOM.
INVISIBLE_CHARS_RE = re.compile(r"[\u200B-\u200F\u202A-\u202E\u2066-\u2069\uFEFF]")

# Presentation-form ligatures that PDF text layers and OCR tend to emit.
LIGATURES = {
    "\uFEFB": "\u0644\u0627", "\uFEFC": "\u0644\u0627",  # lam-alef
    "\uFEF7": "\u0644\u0623", "\uFEF8": "\u0644\u0623",  # lam-alef, hamza above
    "\uFEF9": "\u0644\u0625", "\uFEFA": "\u0644\u0625",  # lam-alef, hamza below
    "\uFEF5": "\u0644\u0622", "\uFEF6": "\u0644\u0622",  # lam-alef, madda
    "\uFDF2": "\u0627\u0644\u0644\u0647",  # Allah ligature
}
LIGATURE_RE = re.compile('|'.join(map(re.escape, LIGATURES)))

WHITESPACE_RE = re.compile(r'\s+')
PUNCTUATION_SPACING_RE = re.compile(r'([،؛؟!.])\s*')
DIGIT_FOLLOWED_RE = re.compile(r'(\d+)([^\d\s])')


def normalize_arabic_text(text: str) -> str:
    """
    Clean text extracted from right-to-left documents:
    strip invisible/bidi characters, NFC-compose, unfold ligatures,
    collapse whitespace and fix spacing after punctuation and digit runs.
    """
    if not text:
        return ''
    text = INVISIBLE_CHARS_RE.sub('', text)
    text = unicodedata.normalize('NFC', text)
    text = LIGATURE_RE.sub(lambda m: LIGATURES[m.group(0)], text)
    text = WHITESPACE_RE.sub(' ', text)
    text = PUNCTUATION_SPACING_RE.sub(r'\1 ', text)
    text = DIGIT_FOLLOWED_RE.sub(r'\1 \2', text)
    return text.strip()


def arabic_ratio(text: str) -> float:
    """Share of Arabic-block characters among non-whitespace characters."""
    if not text:
        return 0.0
    total = len(WHITESPACE_RE.sub('', text))
    if total == 0:
        return 0.0
    return len(ARABIC_CHAR_RE.findall(text)) / total


def is_valid_arabic_text(text: str) -> bool:
    return arabic_ratio(text) > ARABIC_MIN_RATIO
