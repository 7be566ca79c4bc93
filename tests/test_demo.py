import math

import pytest

from entropyarcade.demo import analyze_distribution, main


def test_uniform_sample_is_excellent():
    report = analyze_distribution(bytes(range(256)))
    assert report.length == 256
    assert report.mean == 127.5
    assert report.entropy == pytest.approx(8.0)
    assert report.chi_square == pytest.approx(0.0)
    assert report.chi_square_verdict == "优秀"
    assert report.entropy_verdict == "优秀"


def test_uniform_sample_most_and_least_common_are_first_byte():
    report = analyze_distribution(bytes(range(256)))
    assert report.most_common == (0, 1)
    assert report.least_common == (0, 1)


def test_skewed_sample_frequencies():
    report = analyze_distribution(bytes([1, 1, 2]))
    assert report.most_common == (1, 2)
    assert report.least_common == (2, 1)
    assert report.mean == pytest.approx(4 / 3)
    assert report.entropy_verdict == "需要改进"


def test_constant_sample_has_zero_spread():
    report = analyze_distribution(bytes([9] * 10))
    assert report.std_dev == 0.0
    assert report.entropy == 0.0
    assert report.chi_square_verdict == "需要改进"


def test_std_dev_is_non_negative_and_finite():
    report = analyze_distribution(bytes([0, 255, 0, 255]))
    assert report.std_dev == pytest.approx(127.5)
    assert math.isfinite(report.chi_square)


def test_report_lines_contain_hex_values():
    lines = analyze_distribution(bytes([1, 1, 2])).lines()
    assert "  最频繁值: 0x01 (出现 2 次)" in lines
    assert "  最不频繁值: 0x02 (出现 1 次)" in lines


def test_empty_sample_raises():
    with pytest.raises(ValueError):
        analyze_distribution(b"")


def test_main_prints_header(capsys):
    status = main([])
    out = capsys.readouterr().out
    assert status in (0, 1)
    assert out.startswith("🎲 外部熵源随机数发生器演示")


def test_main_rejects_unknown_option():
    with pytest.raises(SystemExit):
        main(["--bogus"])