from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Optional, Sequence

from ..client import InventoryClient
from ..config import InventorySettings, load_settings
from ..domain.pricing import preview_selling_price
from ..identity import IdentityProvider
from ..inventory.constants import TAXONOMY_KINDS
from ..inventory.feedback import ConfirmationPrompt
from ..inventory.form import FormFieldError
from ..inventory.session import InventorySession
from ..logging import get_logger
from ..paths import find_project_root
from ..store.documents import DocumentNotFoundError, DocumentStore

LOG = get_logger("cli-main")


def _settings() -> InventorySettings:
    return load_settings(os.getcwd())


def _open_session(ns: argparse.Namespace) -> Optional[InventorySession]:
    settings = _settings()
    user = ns.user or settings.user_id
    if not user:
        LOG.error("No identity. Pass --user or set INVENTORY_USER_ID.")
        return None
    store = DocumentStore(root_dir=find_project_root(os.getcwd()), db_path=ns.db or settings.db_path)
    identity = IdentityProvider()
    session = InventorySession(
        store,
        identity,
        namespace=settings.app_id,
        toast_seconds=settings.toast_seconds,
    ).start()
    identity.sign_in(user)
    return session


def _print(payload: object) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _confirmed(session: InventorySession, prompt: ConfirmationPrompt, assume_yes: bool) -> bool:
    """Run the open prompt after a [y/N] answer on stdin (or `--yes`); cancel otherwise."""
    if not assume_yes:
        answer = input(f"{prompt.title} {prompt.message} [y/N] ").strip().lower()
        if answer not in ("y", "yes"):
            session.confirmations.cancel(prompt.id)
            LOG.info("Deletion cancelled.")
            return False
    session.confirmations.confirm(prompt.id)
    return True


def _add_local_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--user", help="User id owning the collections (defaults to INVENTORY_USER_ID)")
    p.add_argument("--db", help="SQLite file (defaults to INVENTORY_DB_PATH or var/inventory/)")


def _add_filter_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--category")
    p.add_argument("--brand")
    p.add_argument("--supplier")


def _add_products_cli(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    products = subparsers.add_parser("products", help="List, add and delete products in the local store.")
    products_sub = products.add_subparsers(dest="products_command", required=True)

    plist = products_sub.add_parser("list", help="Print products matching the filters")
    _add_local_args(plist)
    _add_filter_args(plist)

    def _list(ns: argparse.Namespace) -> int:
        session = _open_session(ns)
        if session is None:
            return 2
        session.set_filters(category=ns.category, brand=ns.brand, supplier=ns.supplier)
        _print(session.rows())
        session.close()
        return 0

    plist.set_defaults(handler=_list)

    padd = products_sub.add_parser("add", help="Validate and save a new product")
    _add_local_args(padd)
    padd.add_argument("--name", required=True)
    padd.add_argument("--description", required=True)
    padd.add_argument("--cost", required=True, help="Cost price")
    padd.add_argument("--markup", default="", help="Mark up in percent")
    padd.add_argument("--sku", default="")
    padd.add_argument("--category")
    padd.add_argument("--brand")
    padd.add_argument("--supplier")
    padd.add_argument("--dimension", default="weight", help="weight|measurements|volume|size|units")
    padd.add_argument(
        "--dim",
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Dimension field for the chosen kind (repeatable), e.g. value=5 unit=kg",
    )

    def _add(ns: argparse.Namespace) -> int:
        session = _open_session(ns)
        if session is None:
            return 2
        form = session.new_form()
        try:
            for field_name, value in (
                ("name", ns.name),
                ("description", ns.description),
                ("cost_price", ns.cost),
                ("markup", ns.markup),
                ("sku", ns.sku),
                ("category", ns.category),
                ("brand", ns.brand),
                ("preferred_supplier", ns.supplier),
            ):
                if value is not None:
                    form.update(field_name, value)
            form.set_dimension_kind(ns.dimension)
            for item in ns.dim:
                key, _, value = item.partition("=")
                form.update_dimension(key.strip(), value)
        except FormFieldError as exc:
            LOG.error(f"Invalid input: {exc}")
            session.close()
            return 2
        result = form.submit()
        session.close()
        if not result.ok:
            _print({"errors": result.errors, "message": result.message})
            return 1
        _print({"id": result.product_id, "selling_price": form.draft.selling_price})
        return 0

    padd.set_defaults(handler=_add)

    pdel = products_sub.add_parser("delete", help="Delete a product by id")
    _add_local_args(pdel)
    pdel.add_argument("product_id")
    pdel.add_argument("--yes", action="store_true", help="Confirm without prompting")

    def _delete(ns: argparse.Namespace) -> int:
        session = _open_session(ns)
        if session is None:
            return 2
        try:
            prompt = session.request_delete_product(ns.product_id)
        except DocumentNotFoundError:
            LOG.error(f"Unknown product: {ns.product_id}")
            session.close()
            return 1
        _confirmed(session, prompt, ns.yes)
        session.close()
        return 0

    pdel.set_defaults(handler=_delete)


def _add_taxonomy_cli(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    tax = subparsers.add_parser("taxonomy", help="Manage categories, brands and suppliers.")
    tax_sub = tax.add_subparsers(dest="taxonomy_command", required=True)

    tlist = tax_sub.add_parser("list", help="List entries of one kind")
    _add_local_args(tlist)
    tlist.add_argument("kind", choices=TAXONOMY_KINDS)

    def _list(ns: argparse.Namespace) -> int:
        session = _open_session(ns)
        if session is None:
            return 2
        _print([e.to_dict() for e in session.taxonomy.entries(ns.kind)])
        session.close()
        return 0

    tlist.set_defaults(handler=_list)

    tadd = tax_sub.add_parser("add", help="Add an entry")
    _add_local_args(tadd)
    tadd.add_argument("kind", choices=TAXONOMY_KINDS)
    tadd.add_argument("name")

    def _add(ns: argparse.Namespace) -> int:
        session = _open_session(ns)
        if session is None:
            return 2
        entry = session.taxonomy.add(ns.name, ns.kind)
        session.close()
        if entry is None:
            LOG.error("Name must not be empty.")
            return 1
        _print(entry.to_dict())
        return 0

    tadd.set_defaults(handler=_add)

    tdel = tax_sub.add_parser("delete", help="Delete an entry that no product uses")
    _add_local_args(tdel)
    tdel.add_argument("kind", choices=TAXONOMY_KINDS)
    tdel.add_argument("entry_id")
    tdel.add_argument("--yes", action="store_true", help="Confirm without prompting")

    def _delete(ns: argparse.Namespace) -> int:
        session = _open_session(ns)
        if session is None:
            return 2
        entry = session.taxonomy.find(ns.kind, ns.entry_id)
        if entry is None:
            LOG.error(f"Unknown {ns.kind}: {ns.entry_id}")
            session.close()
            return 1
        prompt = session.taxonomy.request_delete(entry, ns.kind)
        if prompt is None:
            toast = session.toasts.current()
            LOG.error(toast.message if toast else "Entry is in use.")
            session.close()
            return 1
        _confirmed(session, prompt, ns.yes)
        session.close()
        return 0

    tdel.set_defaults(handler=_delete)


def _add_remote_cli(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    remote = subparsers.add_parser("remote", help="Query a running inventory API.")
    remote.add_argument("--base-url", help="API base URL (defaults to INVENTORY_BASE_URL)")
    remote.add_argument("--timeout", type=int, default=30)
    remote_sub = remote.add_subparsers(dest="remote_command", required=True)

    def _client(ns: argparse.Namespace) -> InventoryClient:
        return InventoryClient(ns.base_url or _settings().base_url, timeout=ns.timeout)

    rhealth = remote_sub.add_parser("health", help="Show API health")
    rhealth.set_defaults(handler=lambda ns: _print(_client(ns).health()) or 0)

    rproducts = remote_sub.add_parser("products", help="List products from the API")
    _add_filter_args(rproducts)

    def _products(ns: argparse.Namespace) -> int:
        payload = _client(ns).list_products(category=ns.category, brand=ns.brand, supplier=ns.supplier)
        _print(payload.get("items", []))
        return 0

    rproducts.set_defaults(handler=_products)


def main(argv: Sequence[str] | None = None) -> int:
    provided = list(argv) if argv is not None else sys.argv[1:]
    LOG.debug(f"CLI invoked with arguments: {provided}")

    parser = argparse.ArgumentParser(
        prog="landscape-inv",
        description="Inventory of products with category, brand and supplier taxonomies.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init = subparsers.add_parser("init", help="Create/ensure the document store exists")
    init.add_argument("--db", help="SQLite file (defaults to INVENTORY_DB_PATH or var/inventory/)")

    def _init(ns: argparse.Namespace) -> int:
        store = DocumentStore(root_dir=find_project_root(os.getcwd()), db_path=ns.db or _settings().db_path)
        LOG.info(f"Document store ready at: {store.db_path}")
        print(store.db_path)
        return 0

    init.set_defaults(handler=_init)

    serve = subparsers.add_parser("serve", help="Run the inventory JSON API.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8001)
    serve.add_argument("--log-level", default="info")
    serve.add_argument("--db", help="SQLite file (defaults to INVENTORY_DB_PATH or var/inventory/)")
    serve.add_argument("--user", help="Fixed user id; anonymous sign-in when omitted")
    serve.add_argument(
        "--allow-origin",
        action="append",
        dest="allow_origins",
        help="Allowed CORS origin (can be provided multiple times, use '*' for any).",
    )

    def _serve(ns: argparse.Namespace) -> int:
        from ..frontend import create_app
        import uvicorn

        app = create_app(
            root_dir=os.getcwd(),
            db_path=ns.db,
            user_id=ns.user,
            allow_origins=ns.allow_origins,
        )
        uvicorn.run(app, host=ns.host, port=ns.port, log_level=ns.log_level)
        return 0

    serve.set_defaults(handler=_serve)

    price = subparsers.add_parser("price", help="Print the selling price for a cost and mark up.")
    price.add_argument("--cost", required=True)
    price.add_argument("--markup", default="")
    price.set_defaults(handler=lambda ns: print(preview_selling_price(ns.cost, ns.markup)) or 0)

    _add_products_cli(subparsers)
    _add_taxonomy_cli(subparsers)
    _add_remote_cli(subparsers)

    args = parser.parse_args(provided)
    code = args.handler(args)
    LOG.debug(f"Subcommand '{args.command}' finished with exit code {code}.")
    return code


if __name__ == "__main__":
    sys.exit(main())
