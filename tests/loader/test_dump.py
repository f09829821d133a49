# tests/loader/test_dump.py
from retro_6502.loader.dump import dump_to_file, format_hex_dump


def test_format_full_lines():
    text = format_hex_dump(bytes(range(32)))
    assert text == (
        "0x0000: 00 01 02 03 04 05 06 07 08 09 0a 0b 0c 0d 0e 0f \n"
        "0x0010: 10 11 12 13 14 15 16 17 18 19 1a 1b 1c 1d 1e 1f \n"
    )


def test_format_partial_range():
    data = bytes(range(256))
    text = format_hex_dump(data, start=0x20, end=0x22)
    assert text == "0x0020: 20 21 22 \n"


def test_end_is_clamped_to_buffer():
    text = format_hex_dump(b"\xab\xcd", end=100)
    assert text == "0x0000: ab cd \n"


def test_empty_buffer():
    assert format_hex_dump(b"") == ""


def test_dump_to_file(tmp_path):
    path = tmp_path / "prg.txt"
    dump_to_file(bytes([0xFF] * 17), str(path))
    lines = path.read_text().splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("0x0000: ff ff")
    assert lines[1] == "0x0010: ff "
