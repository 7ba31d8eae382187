from meetassist.pipelines.transliteration import (
    WORD_MAP,
    has_devanagari,
    transliterate,
    transliterate_chars,
    transliterate_words,
)


def test_dictionary_word_for_yes():
    out = transliterate("हाँ")
    assert out == "haan"
    assert not has_devanagari(out)


def test_mixed_sentence_keeps_english_words():
    out = transliterate("हाँ, meeting आज है और deadline कल है")
    assert "haan" in out
    assert "aaj" in out
    assert "aur" in out
    assert "kal" in out
    assert "meeting" in out and "deadline" in out
    assert not has_devanagari(out)


def test_dictionary_words_do_not_match_inside_longer_words():
    # "कल" is a dictionary word but must not be replaced inside "कलम".
    assert transliterate_words("कलम") == "कलम"


def test_every_dictionary_word_is_fully_romanised():
    for word, latin in WORD_MAP.items():
        assert transliterate(word) == latin


def test_character_pass_removes_remaining_devanagari():
    out = transliterate_chars("किताब")
    assert not has_devanagari(out)
    assert out


def test_latin_text_is_unchanged():
    text = "Sprint planning, action items by Friday."
    assert transliterate(text) == text


def test_rare_signs_and_letters_are_romanised():
    assert transliterate("बॅट") == "bet"
    assert transliterate("ऍप") == "ep"
    assert transliterate("ॐ") == "om"
    assert not has_devanagari(transliterate("ठीकऽ"))


def test_whole_devanagari_block_leaves_nothing_behind():
    block = "".join(chr(code) for code in range(0x0900, 0x0980))
    assert not has_devanagari(transliterate(block))
