import pytest

from viz_playground.models import Row


@pytest.fixture
def sales_rows() -> list[Row]:
    """Small mixed-type dataset shared across tests."""
    return [
        {"region": "north", "units": 10, "price": 2.5, "date": "2024-01-01"},
        {"region": "south", "units": 20, "price": 5.0, "date": "2024-01-02"},
        {"region": "north", "units": 30, "price": 7.5, "date": "2024-01-03"},
        {"region": "east", "units": None, "price": "n/a", "date": "2024-01-04"},
    ]
