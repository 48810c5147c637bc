import re
from typing import Any, Dict, List

from fastapi import APIRouter, Request

from app.core.dependencies import ProxyDependency
from app.core.responses import ErrorResponse
from app.services.proxy import PLACEHOLDER, route_path

router = APIRouter(tags=["Countries"])


def proxy_route(template: str):
    """Endpoint forwarding to the upstream path ``template`` through the cache."""

    async def endpoint(request: Request, proxy: ProxyDependency):
        return await proxy.handle(template, request)

    endpoint.__name__ = "proxy_" + re.sub(r"\W+", "_", template).strip("_")
    return endpoint


def _path_parameters(template: str, description: str) -> List[Dict[str, Any]]:
    return [
        {
            "name": name,
            "in": "path",
            "required": True,
            "description": description,
            "schema": {"type": "string"},
        }
        for name in PLACEHOLDER.findall(template)
    ]


# (upstream template, summary, parameter description)
COUNTRY_ROUTES = [
    ("/all", "Get all countries", ""),
    ("/name/:name", "Get country by name", "Country name"),
    ("/alpha/:code", "Get country by code", "Country code (cca2, ccn3, cca3 or cioc)"),
    ("/currency/:currency", "Get countries by currency", "Currency code or name"),
    ("/lang/:language", "Get countries by language", "Language code or name"),
    ("/capital/:capital", "Get countries by capital city", "Capital city name"),
    ("/region/:region", "Get countries by region", "Region name"),
]

router.add_api_route(
    "/independent",
    proxy_route("/independent"),
    methods=["GET"],
    summary="Get all independent countries",
    responses={500: {"model": ErrorResponse}},
    openapi_extra={
        "parameters": [
            {
                "name": "status",
                "in": "query",
                "required": False,
                "description": "Independent status",
                "schema": {"type": "boolean"},
            }
        ]
    },
)

for template, summary, description in COUNTRY_ROUTES:
    router.add_api_route(
        route_path(template),
        proxy_route(template),
        methods=["GET"],
        summary=summary,
        responses={500: {"model": ErrorResponse}},
        openapi_extra={"parameters": _path_parameters(template, description)},
    )
