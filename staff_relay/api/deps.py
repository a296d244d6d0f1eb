"""
API dependencies

The directory and dispatcher are built once in create_app() and stored on
app.state; routes read them from there instead of module globals.
"""
from fastapi import Request

from staff_relay.services.directory import StaffDirectory
from staff_relay.services.dispatcher import Dispatcher


def get_directory(request: Request) -> StaffDirectory:
    return request.app.state.directory


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher
