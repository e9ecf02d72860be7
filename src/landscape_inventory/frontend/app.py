from __future__ import annotations

import time
from typing import Any, Callable, List, Optional

from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from ..config import load_settings
from ..domain.pricing import preview_selling_price
from ..identity import IdentityProvider
from ..inventory.feedback import ConfirmationError
from ..inventory.form import FormFieldError, ProductForm, SubmitResult
from ..inventory.listing import ProductFilters
from ..inventory.parser import JsonValidationError, apply_payload, parse_product_payload
from ..inventory.session import InventorySession
from ..inventory.taxonomy import UnknownTaxonomyKindError, check_kind
from ..logging import get_logger
from ..paths import find_project_root
from ..store.documents import DocumentNotFoundError, DocumentStore, StoreError


LOG = get_logger("inventory-frontend")


async def _json_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Request body must be valid JSON") from exc


def _query_filters(session: InventorySession, request: Request) -> ProductFilters:
    qp = request.query_params
    filters = session.filters
    for kind, key in (("category", "category"), ("brand", "brand"), ("supplier", "supplier")):
        if key in qp:
            filters = filters.with_selection(kind, qp.get(key))
    return filters


def _submit_response(form: ProductForm, result: SubmitResult, *, status_code: int) -> JSONResponse:
    if result.ok:
        product = form.session.get_product(result.product_id or "")
        return JSONResponse({"id": result.product_id, "product": product.to_dict()}, status_code=status_code)
    if result.errors:
        return JSONResponse({"errors": result.errors, "draft": form.draft.to_dict()}, status_code=422)
    return JSONResponse({"detail": result.message, "draft": form.draft.to_dict()}, status_code=503)


def create_app(
    root_dir: Optional[str] = None,
    *,
    db_path: Optional[str] = None,
    user_id: Optional[str] = None,
    app_id: Optional[str] = None,
    allow_origins: Optional[List[str]] = None,
    toast_seconds: Optional[float] = None,
    clock: Callable[[], float] = time.monotonic,
) -> Starlette:
    """Create a Starlette app exposing the inventory workflow as a JSON API."""

    project_root = find_project_root(root_dir)
    settings = load_settings(project_root)
    store = DocumentStore(root_dir=project_root, db_path=db_path or settings.db_path)
    identity = IdentityProvider()
    session = InventorySession(
        store,
        identity,
        namespace=app_id or settings.app_id,
        toast_seconds=toast_seconds or settings.toast_seconds,
        clock=clock,
    ).start()

    fixed_user = user_id or settings.user_id
    if fixed_user:
        identity.sign_in(fixed_user)
    else:
        identity.sign_in_anonymously()
    LOG.info("Inventory API ready for user %s (namespace %s)", identity.current_user_id, session.namespace)

    def _require_kind(kind: str) -> str:
        try:
            return check_kind(kind)
        except UnknownTaxonomyKindError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    def _product_form(factory: Callable[[str], ProductForm], product_id: str) -> ProductForm:
        try:
            return factory(product_id)
        except DocumentNotFoundError as exc:
            raise HTTPException(status_code=404, detail="Product not found") from exc

    async def _apply_body(request: Request, form: ProductForm) -> None:
        body = await _json_body(request)
        try:
            apply_payload(form, parse_product_payload(body))
        except (JsonValidationError, FormFieldError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    async def health(_: Request) -> JSONResponse:
        return JSONResponse(
            {
                "status": "ok",
                "db_path": store.db_path,
                "user_id": session.user_id,
                "namespace": session.namespace,
            }
        )

    async def products(request: Request) -> JSONResponse:
        filters = _query_filters(session, request)
        rows = session.rows(filters)
        return JSONResponse(
            {
                "items": rows,
                "total": len(rows),
                "filters": filters.to_dict(),
                "loading": session.loading,
            }
        )

    async def product_detail(request: Request) -> JSONResponse:
        try:
            product = session.get_product(request.path_params["product_id"])
        except DocumentNotFoundError as exc:
            raise HTTPException(status_code=404, detail="Product not found") from exc
        return JSONResponse(product.to_dict())

    async def create_product(request: Request) -> JSONResponse:
        form = session.new_form()
        await _apply_body(request, form)
        return _submit_response(form, form.submit(), status_code=201)

    async def update_product(request: Request) -> JSONResponse:
        form = _product_form(session.edit_form, request.path_params["product_id"])
        await _apply_body(request, form)
        return _submit_response(form, form.submit(), status_code=200)

    async def duplicate_product(request: Request) -> JSONResponse:
        form = _product_form(session.duplicate_form, request.path_params["product_id"])
        return JSONResponse({"draft": form.draft.to_dict()})

    async def delete_product(request: Request) -> JSONResponse:
        try:
            prompt = session.request_delete_product(request.path_params["product_id"])
        except DocumentNotFoundError as exc:
            raise HTTPException(status_code=404, detail="Product not found") from exc
        return JSONResponse({"confirmation": prompt.to_dict()}, status_code=202)

    async def filters(request: Request) -> JSONResponse:
        if request.method == "PUT":
            body = await _json_body(request)
            if not isinstance(body, dict):
                raise HTTPException(status_code=400, detail="Payload must be a JSON object")
            session.set_filters(
                category=body.get("category"),
                brand=body.get("brand"),
                supplier=body.get("supplier"),
            )
        return JSONResponse(session.filters.to_dict())

    async def pricing_preview(request: Request) -> JSONResponse:
        body = await _json_body(request)
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="Payload must be a JSON object")
        return JSONResponse({"selling_price": preview_selling_price(body.get("cost_price"), body.get("markup"))})

    async def taxonomy(request: Request) -> JSONResponse:
        kind = _require_kind(request.path_params["kind"])
        if request.method == "POST":
            body = await _json_body(request)
            name = body.get("name") if isinstance(body, dict) else None
            if name is not None and not isinstance(name, str):
                raise HTTPException(status_code=400, detail="name must be text")
            try:
                entry = session.taxonomy.add(name or "", kind)
            except StoreError as exc:
                raise HTTPException(status_code=503, detail=str(exc)) from exc
            if entry is None:
                raise HTTPException(status_code=400, detail="Name must not be empty")
            return JSONResponse(entry.to_dict(), status_code=201)
        return JSONResponse({"items": [e.to_dict() for e in session.taxonomy.entries(kind)]})

    async def taxonomy_delete(request: Request) -> JSONResponse:
        kind = _require_kind(request.path_params["kind"])
        entry = session.taxonomy.find(kind, request.path_params["entry_id"])
        if entry is None:
            raise HTTPException(status_code=404, detail=f"Unknown {kind}")
        prompt = session.taxonomy.request_delete(entry, kind)
        if prompt is None:
            toast = session.toasts.current()
            message = toast.message if toast else f'"{entry.name}" is in use'
            return JSONResponse({"detail": message, "toast": toast.to_dict() if toast else None}, status_code=409)
        return JSONResponse({"confirmation": prompt.to_dict()}, status_code=202)

    async def confirmations(_: Request) -> JSONResponse:
        prompt = session.confirmations.current
        return JSONResponse({"confirmation": prompt.to_dict() if prompt else None})

    async def confirmation_action(request: Request) -> JSONResponse:
        prompt_id = request.path_params["prompt_id"]
        try:
            if request.method == "DELETE":
                session.confirmations.cancel(prompt_id)
                return JSONResponse({"status": "cancelled"})
            session.confirmations.confirm(prompt_id)
        except ConfirmationError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except StoreError as exc:
            LOG.exception("Confirmed action failed")
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return JSONResponse({"status": "confirmed", "filters": session.filters.to_dict()})

    async def toasts(_: Request) -> JSONResponse:
        toast = session.toasts.current()
        return JSONResponse({"toast": toast.to_dict() if toast else None})

    async def api_only(_: Request) -> JSONResponse:
        return JSONResponse({"detail": "Inventory API is running. See /api/health."})

    routes = [
        Route("/", api_only, methods=["GET"]),
        Route("/api/health", health, methods=["GET"]),
        Route("/api/products", products, methods=["GET"]),
        Route("/api/products", create_product, methods=["POST"]),
        Route("/api/products/{product_id:str}", product_detail, methods=["GET"]),
        Route("/api/products/{product_id:str}", update_product, methods=["PUT"]),
        Route("/api/products/{product_id:str}", delete_product, methods=["DELETE"]),
        Route("/api/products/{product_id:str}/duplicate", duplicate_product, methods=["POST"]),
        Route("/api/filters", filters, methods=["GET", "PUT"]),
        Route("/api/pricing/preview", pricing_preview, methods=["POST"]),
        Route("/api/taxonomies/{kind:str}", taxonomy, methods=["GET", "POST"]),
        Route("/api/taxonomies/{kind:str}/{entry_id:str}", taxonomy_delete, methods=["DELETE"]),
        Route("/api/confirmations", confirmations, methods=["GET"]),
        Route("/api/confirmations/{prompt_id:str}", confirmation_action, methods=["POST", "DELETE"]),
        Route("/api/toasts", toasts, methods=["GET"]),
    ]

    app = Starlette(debug=False, routes=routes)
    app.state.session = session
    app.state.store = store

    origins = allow_origins or ["http://localhost:5173", "http://127.0.0.1:5173"]
    if "*" in origins:
        cors_allow_origins = ["*"]
    else:
        cors_allow_origins = origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app


__all__ = ["create_app"]
