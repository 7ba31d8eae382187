"""Devanagari to Latin transliteration for Hinglish transcripts.

The transcription provider has no code-mixed model, so Hinglish audio is sent to the
Hindi model and the Devanagari output is romanised here in two passes: whole words
from a small dictionary first, then single characters. The word pass must run first;
once characters are replaced the dictionary keys no longer match.
"""
from __future__ import annotations

import re

DEVANAGARI_RANGE = "ऀ-ॿ"

WORD_MAP: dict[str, str] = {
    "मैं": "main",
    "आज": "aaj",
    "कल": "kal",
    "अभी": "abhi",
    "क्या": "kya",
    "कैसे": "kaise",
    "कहाँ": "kahan",
    "कब": "kab",
    "कौन": "kaun",
    "कितना": "kitna",
    "यह": "yeh",
    "वह": "voh",
    "हाँ": "haan",
    "नहीं": "nahin",
    "और": "aur",
    "या": "ya",
    "भी": "bhi",
    "के": "ke",
    "का": "ka",
    "की": "ki",
    "को": "ko",
    "से": "se",
    "में": "mein",
    "पर": "par",
    "गया": "gaya",
    "आया": "aaya",
    "किया": "kiya",
    "होगा": "hoga",
    "था": "tha",
    "है": "hai",
    "हैं": "hain",
    "थे": "the",
    "बहुत": "bahut",
    "अच्छा": "accha",
    "बुरा": "bura",
    "छोटा": "chota",
    "बड़ा": "bada",
    "अच्छी": "acchi",
    "ठीक": "theek",
    "सही": "sahi",
    "गलत": "galat",
    "काम": "kaam",
    "घर": "ghar",
    "ऑफिस": "office",
    "मीटिंग": "meeting",
    "टाइम": "time",
    "डे": "day",
    "वीक": "week",
    "ईयर": "year",
    "बात": "baat",
    "चलो": "chalo",
    "जाना": "jaana",
    "आना": "aana",
    "देखना": "dekhna",
    "सुनना": "sunna",
    "कहना": "kahna",
    "भाई": "bhai",
    "यार": "yaar",
    "दोस्त": "dost",
}

CHAR_MAP: dict[str, str] = {
    # vowels
    "अ": "a", "आ": "aa", "इ": "i", "ई": "ee", "उ": "u", "ऊ": "oo", "ऋ": "ri",
    "ए": "e", "ऐ": "ai", "ओ": "o", "औ": "au", "ऑ": "o",
    "ऍ": "e", "ऎ": "e", "ऒ": "o", "ॠ": "ri", "ऌ": "li", "ॐ": "om", "ऽ": "",
    # consonants
    "क": "k", "ख": "kh", "ग": "g", "घ": "gh", "ङ": "n",
    "च": "ch", "छ": "chh", "ज": "j", "झ": "jh", "ञ": "n",
    "ट": "t", "ठ": "th", "ड": "d", "ढ": "dh", "ण": "n",
    "त": "t", "थ": "th", "द": "d", "ध": "dh", "न": "n",
    "प": "p", "फ": "ph", "ब": "b", "भ": "bh", "म": "m",
    "य": "y", "र": "r", "ल": "l", "व": "v",
    "श": "sh", "ष": "sh", "स": "s", "ह": "h", "ळ": "l",
    # precomposed nukta letters
    "क़": "q", "ख़": "kh", "ग़": "gh", "ज़": "z",
    "ड़": "r", "ढ़": "rh", "फ़": "f", "य़": "y",
    # vowel signs
    "ा": "aa", "ि": "i", "ी": "ee", "ु": "u", "ू": "oo", "ृ": "ri",
    "े": "e", "ै": "ai", "ो": "o", "ौ": "au", "ॉ": "o", "ॅ": "e", "ॆ": "e", "ॊ": "o",
    # diacritics and punctuation
    "ं": "n", "ँ": "n", "ः": "h", "़": "", "्": "", "।": ".", "॥": ".",
}
CHAR_MAP.update({chr(0x0966 + digit): str(digit) for digit in range(10)})

# Longest keys first so a word is never shadowed by a shorter dictionary entry.
_WORD_PATTERN = re.compile(
    rf"(?<![{DEVANAGARI_RANGE}])("
    + "|".join(re.escape(word) for word in sorted(WORD_MAP, key=len, reverse=True))
    + rf")(?![{DEVANAGARI_RANGE}])"
)
_DEVANAGARI = re.compile(rf"[{DEVANAGARI_RANGE}]")


def transliterate_words(text: str) -> str:
    return _WORD_PATTERN.sub(lambda m: WORD_MAP[m.group(1)], text)


def transliterate_chars(text: str) -> str:
    """Map known characters, then drop any Devanagari code point without a mapping."""
    mapped = "".join(CHAR_MAP.get(ch, ch) for ch in text)
    return _DEVANAGARI.sub("", mapped)


def transliterate(text: str) -> str:
    """Romanise Devanagari text: dictionary words, then remaining characters."""
    if not text or not _DEVANAGARI.search(text):
        return text
    return transliterate_chars(transliterate_words(text))


def has_devanagari(text: str) -> bool:
    return bool(_DEVANAGARI.search(text))
