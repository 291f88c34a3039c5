import pytest
from fastapi.testclient import TestClient

from enquiry_desk.core.config import Settings
from enquiry_desk.core.lead_fsm import Lead
from enquiry_desk.main import create_app
from enquiry_desk.sales.pipeline import SalesPipeline
from enquiry_desk.sales.store import InMemoryLeadStore, InMemoryOrderStore

WEBHOOK_TOKEN = "test-verify-token"


@pytest.fixture
def settings():
    s = Settings()
    s.STORE_BACKEND = "memory"
    s.WHATSAPP_API_TOKEN = "test-token"
    s.WHATSAPP_PHONE_NUMBER_ID = "1234567890"
    s.WHATSAPP_API_BASE_URL = "https://graph.example.test/v18.0"
    s.WHATSAPP_WEBHOOK_TOKEN = WEBHOOK_TOKEN
    s.SEED_SAMPLE_STOCK = False
    s.SEED_SAMPLE_LICENCES = False
    return s


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture
def pipeline():
    return SalesPipeline(InMemoryLeadStore(), InMemoryOrderStore())


@pytest.fixture
def make_lead():
    def _make(**fields):
        fields.setdefault("customer_name", "Raj Kumar")
        fields.setdefault("phone", "9876543210")
        return Lead(**fields)
    return _make
