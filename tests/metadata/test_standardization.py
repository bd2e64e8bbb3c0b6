from datetime import date

import pytest

from bitmagnet_addon.metadata.standardization import standardize_title, standardize_year


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Tom & Jerry", "Tom and Jerry"),
        ("The.Matrix.1999", "The Matrix"),
        ("Show Name S01E02", "Show Name"),
        ("Show Name Season 2", "Show Name"),
        ("Movie (Extended)", "Movie"),
        ("Some_Movie-Title", "Some Movie Title"),
        ("  Spaced   Out  ", "Spaced Out"),
        ("", ""),
        (None, ""),
    ],
)
def test_standardize_title(title, expected):
    assert standardize_title(title) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2023-05-01", 2023),
        ("2023-05-01T10:00:00Z", 2023),
        (2023, 2023),
        ("1999", 1999),
        ("abc", None),
        ("1850", None),
        (None, None),
        (str(date.today().year + 10), None),
    ],
)
def test_standardize_year(value, expected):
    assert standardize_year(value) == expected
