import pytest

from coachbook.core.db import to_driver_url


@pytest.mark.parametrize(
    "url, expected",
    [
        (
            "postgresql://u:p@db.example.com/coach?sslmode=require&channel_binding=require",
            "postgresql+asyncpg://u:p@db.example.com/coach",
        ),
        ("postgres://u:p@localhost:5432/coach", "postgresql+asyncpg://u:p@localhost:5432/coach"),
        (
            "postgresql://u:p@localhost/coach?application_name=coachbook",
            "postgresql+asyncpg://u:p@localhost/coach?application_name=coachbook",
        ),
        ("postgresql+asyncpg://u:p@localhost/coach", "postgresql+asyncpg://u:p@localhost/coach"),
    ],
)
def test_asyncpg_url(url, expected):
    assert to_driver_url(url, "asyncpg") == expected


def test_sync_url_keeps_libpq_params():
    assert (
        to_driver_url("postgresql://u:p@localhost/coach?sslmode=require", "psycopg2")
        == "postgresql+psycopg2://u:p@localhost/coach?sslmode=require"
    )
