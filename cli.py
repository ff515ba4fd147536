"""
CLI for Atlas Admin.
Inspect orders, change their status, or start the dashboard / sandbox API.
"""

import sys
import argparse
from pathlib import Path

project_root = Path(__file__).resolve().parent

ORDER_STATUSES = ["pending", "processing", "completed", "cancelled"]
PAYMENT_STATUSES = ["pending", "paid", "failed"]


def _setup():
    """Load config, configure logging and wire the API client."""
    from atlas_admin.core.config import get_config
    from atlas_admin.core.logging import setup_logging
    from atlas_admin.auth.session import create_session_store_from_config
    from atlas_admin.orders.client import create_client_from_config

    config = get_config()
    setup_logging(config.log_path, config.get('general', 'log_level', default='INFO'))

    session = create_session_store_from_config()
    client = create_client_from_config(session)
    return config, session, client


def _print_notifications(queue) -> bool:
    """Print queued notifications. Returns False if any was an error."""
    from atlas_admin.core.notifications import ERROR

    ok = True
    for n in queue.drain():
        print(f"[{n.level.upper()}] {n.message}")
        if n.level == ERROR:
            ok = False
    return ok


def _controller():
    from atlas_admin.core.notifications import NotificationQueue
    from atlas_admin.orders.controller import create_controller_from_config

    config, session, client = _setup()
    queue = NotificationQueue()
    return create_controller_from_config(client, queue), queue


def cmd_orders(args):
    """List orders with the dashboard filters."""
    from atlas_admin.core.notifications import NotificationQueue
    from atlas_admin.orders.controller import create_controller_from_config
    from atlas_admin.orders.display import orders_to_dataframe, format_currency
    from atlas_admin.orders.views import OrderListView

    config, session, client = _setup()
    queue = NotificationQueue()
    view = OrderListView(client, create_controller_from_config(client, queue), queue)
    view.load_orders()
    if not _print_notifications(queue):
        return 1

    orders = view.filtered(args.search, args.status, args.payment)

    if args.export:
        Path(args.export).write_text(view.export_csv(args.search, args.status, args.payment), encoding='utf-8')
        print(f"[OK] Exported {len(orders)} orders to {args.export}")
        return 0

    if not orders:
        print("Nenhum pedido encontrado com os filtros aplicados")
        return 0

    df = orders_to_dataframe(orders)
    df['Total'] = df['Total'].apply(format_currency)
    print(df.to_string(index=False))
    print(f"\n{len(orders)} of {len(view.orders)} orders")
    return 0


def cmd_show(args):
    """Show one order and the actions it offers."""
    from atlas_admin.orders.controller import create_controller_from_config
    from atlas_admin.core.notifications import NotificationQueue
    from atlas_admin.orders.display import format_currency, format_datetime, items_to_dataframe
    from atlas_admin.orders.views import OrderDetailView
    from atlas_admin.orders.workflow import payment_status_label, status_label

    config, session, client = _setup()
    view = OrderDetailView(client, create_controller_from_config(client, NotificationQueue()), args.order_id)
    order = view.load()
    if view.error:
        print(f"[ERROR] {view.error}")
        return 1
    if order is None:
        print(f"[ERROR] Pedido #{args.order_id} não encontrado")
        return 1

    print(f"Pedido #{order.id} - {format_datetime(order.created_at)}")
    print(f"   Cliente:   {order.customer_name or '-'}")
    print(f"   Total:     {format_currency(order.total_amount)}")
    print(f"   Status:    {status_label(order.status)}")
    print(f"   Pagamento: {payment_status_label(order.payment_status)}")
    if order.tracking_code:
        print(f"   Rastreio:  {order.tracking_code}")
    print()
    print(items_to_dataframe(order).to_string(index=False))

    actions = view.actions()
    offered = [
        name for name, enabled in (
            ("complete", actions.can_complete),
            ("cancel", actions.can_cancel),
            ("mark-paid", actions.can_mark_paid),
            ("mark-failed", actions.can_mark_failed),
        ) if enabled
    ]
    print(f"\nActions: {', '.join(offered) or 'none'}")
    return 0


def _current_order(controller, order_id):
    """Fetch the order a change starts from, so the transition policy can judge it."""
    from atlas_admin.core.errors import ApiError

    try:
        order = controller.client.get_order(order_id)
    except ApiError as e:
        print(f"[ERROR] Could not load order #{order_id}: {e}")
        return None
    if order is None:
        print(f"[ERROR] Pedido #{order_id} não encontrado")
    return order


def cmd_set_status(args):
    """Change the order status."""
    controller, queue = _controller()
    current = _current_order(controller, args.order_id)
    if current is None:
        return 1
    result = controller.set_order_status(args.order_id, args.status, current)
    _print_notifications(queue)
    return 0 if result.applied else 1


def cmd_set_payment(args):
    """Change the payment status."""
    controller, queue = _controller()
    current = _current_order(controller, args.order_id)
    if current is None:
        return 1
    result = controller.set_payment_status(args.order_id, args.status, current)
    _print_notifications(queue)
    return 0 if result.applied else 1


def cmd_set_item_status(args):
    """Change one item's status."""
    controller, queue = _controller()
    current = _current_order(controller, args.order_id)
    if current is None:
        return 1
    result = controller.set_item_status(args.order_id, args.item_id, args.status, current)
    _print_notifications(queue)
    return 0 if result.applied else 1


def cmd_login(args):
    """Sign in and persist the session token."""
    from atlas_admin.auth.session import sign_in
    from atlas_admin.core.errors import ApiError

    config, session, client = _setup()
    try:
        user = sign_in(client, session, args.email, args.password)
    except (ValueError, ApiError) as e:
        print(f"[ERROR] Login failed: {e}")
        return 1
    print(f"[OK] Signed in as {user.name} <{user.email}>")
    return 0


def cmd_logout(args):
    """Forget the persisted session."""
    config, session, client = _setup()
    session.clear()
    print("[OK] Signed out")
    return 0


def cmd_sandbox(args):
    """Start the in-memory sandbox API."""
    import uvicorn

    print(f"[SANDBOX] Starting sandbox API on http://{args.host}:{args.port}")
    print(f"   Docs: http://{args.host}:{args.port}/docs")

    uvicorn.run(
        "atlas_admin.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload
    )
    return 0


def cmd_dashboard(args):
    """Start the Streamlit dashboard."""
    import subprocess

    print("[DASHBOARD] Starting dashboard...")
    print("   Note: the orders API must be reachable (try `python cli.py sandbox`)")

    completed = subprocess.run([
        sys.executable, "-m", "streamlit", "run",
        str(project_root / "dashboard.py"),
        "--server.port", str(args.port)
    ])
    return completed.returncode


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Atlas Admin CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli.py orders --status pending --payment paid
  python cli.py show 5
  python cli.py set-status 5 completed
  python cli.py set-item-status 5 12 processing
  python cli.py sandbox
  python cli.py dashboard
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    orders_parser = subparsers.add_parser("orders", help="List orders")
    orders_parser.add_argument("--search", type=str, default="", help="Order id or customer name")
    orders_parser.add_argument("--status", choices=["all"] + ORDER_STATUSES, default="all")
    orders_parser.add_argument("--payment", choices=["all"] + PAYMENT_STATUSES, default="all")
    orders_parser.add_argument("--export", type=str, default=None, help="Write the list to this CSV file")

    show_parser = subparsers.add_parser("show", help="Show one order")
    show_parser.add_argument("order_id", type=int)

    status_parser = subparsers.add_parser("set-status", help="Change order status")
    status_parser.add_argument("order_id", type=int)
    status_parser.add_argument("status", choices=ORDER_STATUSES)

    payment_parser = subparsers.add_parser("set-payment", help="Change payment status")
    payment_parser.add_argument("order_id", type=int)
    payment_parser.add_argument("status", choices=PAYMENT_STATUSES)

    item_parser = subparsers.add_parser("set-item-status", help="Change an item's status")
    item_parser.add_argument("order_id", type=int)
    item_parser.add_argument("item_id", type=int)
    item_parser.add_argument("status", choices=ORDER_STATUSES)

    login_parser = subparsers.add_parser("login", help="Sign in and save the session")
    login_parser.add_argument("--email", type=str, required=True)
    login_parser.add_argument("--password", type=str, required=True)

    subparsers.add_parser("logout", help="Forget the saved session")

    sandbox_parser = subparsers.add_parser("sandbox", help="Start the in-memory sandbox API")
    sandbox_parser.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind")
    sandbox_parser.add_argument("--port", type=int, default=3333, help="Port to listen on")
    sandbox_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    dashboard_parser = subparsers.add_parser("dashboard", help="Start Streamlit dashboard")
    dashboard_parser.add_argument("--port", type=int, default=8501, help="Dashboard port")

    return parser


COMMANDS = {
    "orders": cmd_orders,
    "show": cmd_show,
    "set-status": cmd_set_status,
    "set-payment": cmd_set_payment,
    "set-item-status": cmd_set_item_status,
    "login": cmd_login,
    "logout": cmd_logout,
    "sandbox": cmd_sandbox,
    "dashboard": cmd_dashboard,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 0
    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
