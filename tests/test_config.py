import pytest

from png_optimizer import config


@pytest.mark.parametrize("cpus, expected", [(None, 1), (1, 1), (2, 1), (8, 7)])
def test_default_worker_count_leaves_one_core(monkeypatch: pytest.MonkeyPatch, cpus, expected) -> None:
    monkeypatch.setattr(config.os, "cpu_count", lambda: cpus)

    assert config.default_worker_count() == expected


def test_supported_extensions_are_lowercase_with_dot() -> None:
    assert config.SUPPORTED_EXTENSIONS == {".png", ".jpg", ".jpeg", ".webp", ".gif", ".tiff", ".tif"}


def test_png_policy_is_fixed() -> None:
    assert (config.PNG_QUALITY, config.PNG_COMPRESSION_LEVEL, config.PNG_EFFORT) == (80, 9, 10)
    assert config.PNG_PALETTE is True
    assert config.PNG_ADAPTIVE_FILTERING is True
