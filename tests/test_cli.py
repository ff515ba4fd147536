"""
Tests for the CLI commands, with the API client replaced by a fake.
"""

import pytest

import cli
from atlas_admin.core.notifications import NotificationQueue
from atlas_admin.orders.controller import OrderStatusController
from atlas_admin.orders.workflow import TransitionPolicy


@pytest.fixture
def wired(monkeypatch, fake_client):
    """Point the CLI at the fake client instead of the configured API."""
    monkeypatch.setattr(cli, '_setup', lambda: (None, None, fake_client))

    queue = NotificationQueue()
    controller = OrderStatusController(fake_client, queue)
    monkeypatch.setattr(cli, '_controller', lambda: (controller, queue))
    return fake_client


def test_orders_lists_filtered(wired, capsys):
    assert cli.main(['orders', '--status', 'completed']) == 0
    out = capsys.readouterr().out
    assert 'Bruno' in out
    assert 'Carla' not in out
    assert '1 of 3 orders' in out


def test_orders_export(wired, tmp_path, capsys):
    target = tmp_path / "orders.csv"
    assert cli.main(['orders', '--payment', 'paid', '--export', str(target)]) == 0
    assert len(target.read_text(encoding='utf-8').strip().splitlines()) == 3


def test_show_prints_actions(wired, capsys):
    assert cli.main(['show', '5']) == 0
    out = capsys.readouterr().out
    assert 'Pedido #5' in out
    assert 'Actions: complete, cancel, mark-paid, mark-failed' in out


def test_show_missing_order(wired, capsys):
    assert cli.main(['show', '404']) == 1


def test_set_status(wired, capsys):
    assert cli.main(['set-status', '5', 'completed']) == 0
    out = capsys.readouterr().out
    assert '[SUCCESS]' in out
    assert 'Concluído' in out
    assert wired.orders[5].status.value == 'completed'


def test_set_status_missing_order(wired, capsys):
    assert cli.main(['set-status', '404', 'completed']) == 1
    assert 'não encontrado' in capsys.readouterr().out
    assert not [c for c in wired.calls if c[0] == 'PUT']


def test_set_status_strict_keeps_completed_order(monkeypatch, fake_client, capsys):
    queue = NotificationQueue()
    controller = OrderStatusController(fake_client, queue, TransitionPolicy(strict=True))
    monkeypatch.setattr(cli, '_controller', lambda: (controller, queue))

    assert cli.main(['set-status', '2', 'pending']) == 1
    assert 'Transição não permitida' in capsys.readouterr().out
    assert fake_client.orders[2].status.value == 'completed'
    assert not [c for c in fake_client.calls if c[0] == 'PUT']


def test_set_item_status_checks_membership(wired, capsys):
    assert cli.main(['set-item-status', '1', '11', 'completed']) == 1
    assert 'não pertence' in capsys.readouterr().out
    assert not [c for c in wired.calls if c[0] == 'PUT']


def test_set_item_status_rejects_unknown_status():
    with pytest.raises(SystemExit):
        cli.main(['set-item-status', '5', '11', 'shipped'])


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert 'Atlas Admin CLI' in capsys.readouterr().out
