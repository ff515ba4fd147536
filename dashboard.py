"""
Streamlit Dashboard for Atlas Admin.
Order list, order detail with status actions, and the customer account page.
"""

import streamlit as st
from datetime import datetime

from atlas_admin.auth.session import create_session_store_from_config, sign_in
from atlas_admin.core.config import get_config
from atlas_admin.core.errors import ApiError
from atlas_admin.core.logging import setup_logging
from atlas_admin.core.notifications import ERROR, SUCCESS, WARNING, Notification, NotificationQueue
from atlas_admin.orders.client import OrdersClient
from atlas_admin.orders.controller import create_controller_from_config, item_key, order_key
from atlas_admin.orders.display import (
    format_currency,
    format_datetime,
    items_to_dataframe,
    orders_to_dataframe,
)
from atlas_admin.orders.filters import ALL
from atlas_admin.orders.models import OrderStatus, PaymentStatus
from atlas_admin.orders.views import CustomerOrdersView, OrderDetailView, OrderListView
from atlas_admin.orders.workflow import (
    customer_status_label,
    payment_status_color,
    payment_status_label,
    status_color,
    status_label,
)

PAGE_LIST = "📦 Pedidos"
PAGE_DETAIL = "🔎 Detalhes do Pedido"
PAGE_ACCOUNT = "👤 Minha Conta"
PAGE_LOGS = "📋 Logs"
PAGES = [PAGE_LIST, PAGE_DETAIL, PAGE_ACCOUNT, PAGE_LOGS]

TOAST_ICONS = {SUCCESS: "✅", WARNING: "⚠️", ERROR: "❌"}

st.set_page_config(
    page_title="Atlas Admin",
    page_icon="📜",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def init_logging():
    """Configure logging once per server process."""
    config = get_config()
    setup_logging(config.log_path, config.get('general', 'log_level', default='INFO'))
    return config


config = init_logging()


# ==================== SESSION STATE ====================

def _on_unauthorized():
    st.session_state['session'].clear()
    st.session_state['redirect_login'] = True
    st.session_state['notifications'](
        Notification(WARNING, "Sessão expirada. Faça login novamente.", key="session-expired")
    )


if 'notifications' not in st.session_state:
    st.session_state['notifications'] = NotificationQueue()
    st.session_state['session'] = create_session_store_from_config()
    st.session_state['client'] = OrdersClient(
        base_url=config.api_base_url,
        token_provider=st.session_state['session'],
        on_unauthorized=_on_unauthorized,
        timeout=config.api_timeout
    )
    st.session_state['controller'] = create_controller_from_config(
        st.session_state['client'], st.session_state['notifications']
    )

notifications: NotificationQueue = st.session_state['notifications']
session = st.session_state['session']
client: OrdersClient = st.session_state['client']
controller = st.session_state['controller']

if st.session_state.pop('redirect_login', False):
    st.session_state['page'] = PAGE_ACCOUNT


def open_order(order_id: int):
    """Button callback: jump to the detail page of an order."""
    st.session_state['detail_order_id'] = order_id
    st.session_state['page'] = PAGE_DETAIL


def badge(label: str, color: str) -> str:
    return f":{color}[**{label}**]"


# ==================== SIDEBAR ====================
st.sidebar.title("📜 Atlas Admin")
st.sidebar.markdown("---")
st.sidebar.caption(f"🌐 API: {config.api_base_url}")

if session.is_authenticated:
    st.sidebar.success(f"👤 {session.user.name}")
else:
    st.sidebar.info("Não autenticado")

st.sidebar.markdown("---")

page = st.sidebar.radio("Navegação", PAGES, key="page", label_visibility="collapsed")

# Every page activation starts from a fresh fetch
if st.session_state.get('active_page') != page:
    st.session_state['active_page'] = page
    st.session_state.pop('list_view', None)
    st.session_state.pop('detail_view', None)
    st.session_state.pop('account_view', None)


def render_notifications():
    for n in notifications.drain():
        st.toast(n.message, icon=TOAST_ICONS.get(n.level, "ℹ️"))


# ==================== ORDER LIST PAGE ====================
if page == PAGE_LIST:
    st.title("📦 Pedidos")

    if 'list_view' not in st.session_state:
        view = OrderListView(client, controller, notifications)
        with st.spinner("Carregando pedidos..."):
            view.load_orders()
        st.session_state['list_view'] = view
    view: OrderListView = st.session_state['list_view']

    col1, col2, col3, col4 = st.columns([2, 1, 1, 1])
    with col1:
        search_term = st.text_input("🔍 Buscar", placeholder="Buscar por ID ou cliente...")
    with col2:
        status_filter = st.selectbox(
            "Status",
            [ALL] + [s.value for s in OrderStatus],
            format_func=lambda x: "Todos os status" if x == ALL else status_label(x)
        )
    with col3:
        payment_filter = st.selectbox(
            "Pagamento",
            [ALL] + [s.value for s in PaymentStatus],
            format_func=lambda x: "Todos os pagamentos" if x == ALL else payment_status_label(x)
        )
    with col4:
        st.write("")
        if st.button("🔄 Recarregar", use_container_width=True):
            with st.spinner("Carregando pedidos..."):
                view.load_orders()

    if view.error:
        st.error(view.error)
    else:
        filtered = view.filtered(search_term, status_filter, payment_filter)

        if filtered:
            df = orders_to_dataframe(filtered)
            df['Total'] = df['Total'].apply(format_currency)
            st.dataframe(
                df,
                use_container_width=True,
                hide_index=True,
                column_config={
                    "ID": st.column_config.NumberColumn("ID", width="small", format="#%d"),
                    "Cliente": st.column_config.TextColumn("Cliente", width="medium"),
                    "Email": st.column_config.TextColumn("Email", width="medium"),
                    "Data": st.column_config.TextColumn("Data", width="small"),
                    "Total": st.column_config.TextColumn("Total", width="small"),
                    "Status": st.column_config.TextColumn("Status", width="small"),
                    "Pagamento": st.column_config.TextColumn("Pagamento", width="small"),
                    "Itens": st.column_config.NumberColumn("Itens", width="small"),
                    "Rastreio": st.column_config.TextColumn("Rastreio", width="small"),
                }
            )
            st.caption(f"Mostrando {len(filtered)} de {len(view.orders)} pedidos")

            c1, c2 = st.columns([3, 1])
            with c1:
                selected_id = st.selectbox(
                    "Abrir pedido",
                    [o.id for o in filtered],
                    format_func=lambda oid: f"#{oid}"
                )
                st.button("Ver", on_click=open_order, args=(selected_id,))
            with c2:
                st.download_button(
                    "⬇️ Exportar",
                    data=view.export_csv(search_term, status_filter, payment_filter),
                    file_name=f"pedidos_{datetime.now().strftime('%Y%m%d_%H%M')}.csv",
                    mime="text/csv",
                    use_container_width=True
                )

            with st.expander("⚡ Ações rápidas"):
                q1, q2, q3 = st.columns(3)
                with q1:
                    quick_id = st.selectbox(
                        "Pedido", [o.id for o in filtered], format_func=lambda oid: f"#{oid}", key="quick_id"
                    )
                with q2:
                    quick_status = st.selectbox(
                        "Novo status", [s.value for s in OrderStatus], format_func=status_label
                    )
                    if st.button("Atualizar status", disabled=controller.is_busy(order_key(quick_id))):
                        view.set_order_status(quick_id, quick_status)
                        st.rerun()
                with q3:
                    quick_payment = st.selectbox(
                        "Novo pagamento", [s.value for s in PaymentStatus], format_func=payment_status_label
                    )
                    if st.button("Atualizar pagamento", disabled=controller.is_busy(order_key(quick_id))):
                        view.set_payment_status(quick_id, quick_payment)
                        st.rerun()
        else:
            st.info("Nenhum pedido encontrado com os filtros aplicados")


# ==================== ORDER DETAIL PAGE ====================
elif page == PAGE_DETAIL:
    order_id = st.number_input(
        "Pedido #",
        min_value=1,
        step=1,
        value=int(st.session_state.get('detail_order_id', 1))
    )
    if st.session_state.get('detail_order_id') != order_id:
        st.session_state['detail_order_id'] = int(order_id)
        st.session_state.pop('detail_view', None)

    if 'detail_view' not in st.session_state:
        detail = OrderDetailView(client, controller, int(order_id))
        with st.spinner("Carregando pedido..."):
            detail.load()
        st.session_state['detail_view'] = detail
    detail: OrderDetailView = st.session_state['detail_view']

    if detail.error:
        st.error(detail.error)
    elif detail.not_found:
        st.warning("Pedido não encontrado")
    else:
        order = detail.order
        actions = detail.actions()
        busy = controller.is_busy(order_key(order.id))

        head, buttons = st.columns([2, 2])
        with head:
            st.title(f"Pedido #{order.id}")
            st.caption(f"Criado em {format_datetime(order.created_at)} · "
                       f"Atualizado em {format_datetime(order.updated_at)}")
        with buttons:
            b1, b2 = st.columns(2)
            with b1:
                if actions.can_complete and st.button("✅ Marcar como Concluído", disabled=busy,
                                                      use_container_width=True):
                    detail.complete()
                    st.rerun()
            with b2:
                if actions.can_cancel and st.button("🛑 Cancelar Pedido", disabled=busy,
                                                    use_container_width=True):
                    detail.cancel()
                    st.rerun()

        st.markdown("---")
        col1, col2, col3 = st.columns(3)
        with col1:
            st.subheader("Cliente")
            if order.user:
                st.write(order.user.name)
                st.caption(order.user.email or "-")
                if order.user.phone:
                    st.caption(order.user.phone)
            else:
                st.caption(f"Usuário #{order.user_id}")
        with col2:
            st.subheader("Pedido")
            st.markdown(f"Status: {badge(status_label(order.status), status_color(order.status))}")
            st.markdown(f"Total: **{format_currency(order.total_amount)}**")
            if order.tracking_code:
                st.caption(f"Rastreio: {order.tracking_code}")
            if order.notes:
                st.caption(f"Observações: {order.notes}")
        with col3:
            st.subheader("Pagamento")
            st.markdown(
                f"Status: {badge(payment_status_label(order.payment_status), payment_status_color(order.payment_status))}"
            )
            st.caption(f"Método: {order.payment_method or '-'}")
            if order.payment_id:
                st.caption(f"ID: {order.payment_id}")
            p1, p2 = st.columns(2)
            with p1:
                if actions.can_mark_paid and st.button("💰 Marcar como Pago", disabled=busy):
                    detail.mark_paid()
                    st.rerun()
            with p2:
                if actions.can_mark_failed and st.button("⚠️ Marcar como Falha", disabled=busy):
                    detail.mark_failed()
                    st.rerun()

        st.markdown("---")
        st.subheader("Itens")
        if not order.items:
            st.info("Nenhum item neste pedido")
        else:
            st.dataframe(items_to_dataframe(order), use_container_width=True, hide_index=True)
            for item in order.items:
                c1, c2, c3 = st.columns([3, 2, 1])
                with c1:
                    st.markdown(
                        f"**{item.certificate_name or f'Certificado #{item.certificate_id}'}** "
                        f"{badge(status_label(item.status), status_color(item.status))}"
                    )
                with c2:
                    target = st.selectbox(
                        "Alterar Status",
                        actions.item_targets[item.id],
                        format_func=status_label,
                        key=f"item_target_{item.id}",
                        label_visibility="collapsed"
                    )
                with c3:
                    if st.button("Alterar", key=f"item_apply_{item.id}",
                                 disabled=controller.is_busy(item_key(order.id, item.id))):
                        detail.set_item_status(item.id, target)
                        st.rerun()


# ==================== ACCOUNT PAGE ====================
elif page == PAGE_ACCOUNT:
    st.title("👤 Minha Conta")

    if not session.is_authenticated:
        with st.form("login"):
            email = st.text_input("Email", placeholder="seu@email.com")
            password = st.text_input("Senha", type="password")
            submitted = st.form_submit_button("Entrar")
        if submitted:
            try:
                sign_in(client, session, email, password)
                notifications(Notification(SUCCESS, "Login realizado com sucesso!"))
                st.rerun()
            except ValueError as e:
                st.error(str(e))
            except ApiError:
                st.error("Erro ao fazer login. Verifique suas credenciais.")
    else:
        user = session.user
        c1, c2 = st.columns([3, 1])
        with c1:
            st.write(f"**{user.name}** · {user.email}")
        with c2:
            if st.button("🚪 Sair", use_container_width=True):
                session.clear()
                st.session_state.pop('account_view', None)
                st.rerun()

        if 'account_view' not in st.session_state:
            account = CustomerOrdersView(client, notifications)
            with st.spinner("Carregando seus pedidos..."):
                account.load(user.id)
            st.session_state['account_view'] = account
        account: CustomerOrdersView = st.session_state['account_view']

        st.subheader("Meus Pedidos")
        if not account.orders:
            st.info("Você ainda não possui pedidos. Explore os certificados disponíveis.")
        for order in account.orders:
            with st.container(border=True):
                o1, o2, o3 = st.columns([2, 1, 1])
                with o1:
                    st.markdown(f"**Pedido #{order.id}**")
                    st.caption(format_datetime(order.created_at))
                with o2:
                    st.write(format_currency(order.total_amount))
                with o3:
                    st.markdown(badge(customer_status_label(order.status), status_color(order.status)))


# ==================== LOGS PAGE ====================
elif page == PAGE_LOGS:
    st.title("📋 Logs")

    log_lines = st.slider("Linhas", min_value=50, max_value=500, value=100, step=50)
    log_file = config.log_path
    if log_file.exists():
        with open(log_file, 'r', encoding='utf-8', errors='ignore') as f:
            lines = f.readlines()
        st.code(''.join(lines[-log_lines:]), language="log")
        st.caption(f"📄 {log_file.name} ({log_file.stat().st_size / 1024:.1f} KB)")
    else:
        st.info("Nenhum log ainda...")


render_notifications()

# Footer
st.sidebar.markdown("---")
st.sidebar.caption("Atlas Admin v1.0")
st.sidebar.caption(f"🕐 {datetime.now().strftime('%H:%M:%S')}")
