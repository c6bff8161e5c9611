from groupbot.wordcount import (
    clamp_message_count,
    count_words,
    is_countable,
    load_stopwords,
    rank_by_word_count,
)


def test_load_stopwords_sorted_and_stripped():
    words = load_stopwords("的\r\n了\r\n啊")
    assert words == sorted(["的", "了", "啊"])
    assert all("\r" not in w for w in words)


def test_is_countable():
    stop = load_stopwords("的\n了")
    assert is_countable("你好", stop)
    assert not is_countable("的", stop)
    assert not is_countable("hello", stop)
    assert not is_countable("你好a", stop)
    assert not is_countable("", stop)
    assert not is_countable("你好\n", stop)


def test_count_words_strips_and_filters():
    stop = load_stopwords("的")
    counts = count_words([" 你好 ", "你好", "的", "abc", "世界"], stop)
    assert counts == {"你好": 2, "世界": 1}


def test_rank_by_word_count_descending():
    freq = {"甲": 1, "乙": 5, "丙": 3}
    ranked = rank_by_word_count(freq)
    assert [w for w, _ in ranked] == ["乙", "丙", "甲"]
    assert dict(ranked) == freq


def test_clamp_message_count():
    assert clamp_message_count(0) == 1000
    assert clamp_message_count(20000) == 10000
    assert clamp_message_count(500) == 500
    assert clamp_message_count(10000) == 10000