from typing import Annotated

from fastapi import Depends, Request

from app.services.health import HealthReporter
from app.services.proxy import CachingProxy


def get_proxy(request: Request) -> CachingProxy:
    return request.app.state.proxy


def get_health_reporter(request: Request) -> HealthReporter:
    return request.app.state.health


ProxyDependency = Annotated[CachingProxy, Depends(get_proxy)]
HealthDependency = Annotated[HealthReporter, Depends(get_health_reporter)]
