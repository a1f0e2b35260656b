import pytest

from api import create_app
from settings import Settings
from store import store_from_url


@pytest.fixture
def example_inputs() -> dict:
    """Worked example: 1000 invoices a month at half an hour each."""
    return {
        "monthly_invoice_volume": 1000,
        "avg_hours_per_invoice": 0.5,
        "hourly_wage": 25,
        "error_rate_manual": 2,
        "error_cost": 50,
        "time_horizon_months": 12,
        "one_time_implementation_cost": 50000,
    }


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'scenarios.db'}",
        public_dir=str(tmp_path / "public"),
    )


@pytest.fixture
def store(settings):
    store = store_from_url(settings.database_url)
    yield store
    store.engine.dispose()


@pytest.fixture
def client(settings, store):
    app = create_app(settings, store=store)
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client
