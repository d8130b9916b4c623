from rvdecode import cache as cache_module
from rvdecode.cache import DecoderCache
from rvdecode.config import DisplayConfig
from rvdecode.decoder import decode_word


def test_first_update_always_decodes():
    cache = DecoderCache()
    assert cache.word is None
    assert cache.result is None

    # Zero is not a valid instruction but must still produce a result
    result = cache.update(0)
    assert cache.word == 0
    assert result is cache.result
    assert not result.valid
    assert str(result) == "invalid instruction 0x00000000"


def test_repeated_word_reuses_result(monkeypatch):
    calls = []

    def counting_decode(word, display):
        calls.append(word)
        return decode_word(word, display)

    monkeypatch.setattr(cache_module, "decode_word", counting_decode)

    cache = DecoderCache()
    first = cache.update(0x00000013)
    second = cache.update(0x00000013)
    assert first is second
    assert calls == [0x13]

    third = cache.update(0x00100073)
    assert third.text == "ebreak"
    assert calls == [0x13, 0x00100073]

    cache.update(0x00000013)
    assert calls == [0x13, 0x00100073, 0x13]


def test_cached_result_matches_recomputation():
    cache = DecoderCache()
    for word in (0x13, 0x13, 0xFFFFFFFF, 0xFFFFFFFF, 0x30200073, 0x13):
        assert cache.update(word) == decode_word(word)


def test_update_masks_to_32_bits():
    cache = DecoderCache()
    result = cache.update(0x1_00008067)
    assert cache.word == 0x00008067
    assert result.text == "jalr     x0, 0(x1)"
    assert cache.update(0x00008067) is result


def test_clear_forces_decode():
    cache = DecoderCache()
    first = cache.update(0x13)
    cache.clear()
    assert cache.result is None
    second = cache.update(0x13)
    assert second == first
    assert second is not first


def test_display_settings_apply():
    cache = DecoderCache(DisplayConfig(register_names="abi"))
    assert cache.update(0x00008067).text == "jalr     zero, 0(ra)"
