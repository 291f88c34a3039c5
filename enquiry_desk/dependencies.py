from fastapi import Request

from .core.config import Settings
from .integrations.whatsapp import WhatsAppClient
from .sales.counter import PosCounter
from .sales.inventory import InventoryService
from .sales.licences import LicenceRegister
from .sales.pipeline import SalesPipeline


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_pipeline(request: Request) -> SalesPipeline:
    return request.app.state.pipeline


def get_inventory(request: Request) -> InventoryService:
    return request.app.state.inventory


def get_whatsapp(request: Request) -> WhatsAppClient:
    return request.app.state.whatsapp


def get_licences(request: Request) -> LicenceRegister:
    return request.app.state.licences


def get_counter(request: Request) -> PosCounter:
    return request.app.state.counter
