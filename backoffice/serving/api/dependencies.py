"""
Request Dependencies

The HTTP layer acts as a single fixed owner; the core itself always takes
owner_id as an explicit argument.
"""

from fastapi import Depends, Request

from backoffice.config import Settings
from backoffice.container import Backoffice


def get_backoffice(request: Request) -> Backoffice:
    """Services bound to the application's store"""
    return request.app.state.backoffice


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with"""
    return request.app.state.settings


def get_owner_id(settings: Settings = Depends(get_app_settings)) -> int:
    """Owner every request acts as"""
    return settings.default_owner_id
