"""CLI tests with Typer's CliRunner."""

import pytest
from rich.console import Console
from typer.testing import CliRunner

from loadboard.cli import main as cli

runner = CliRunner()


@pytest.fixture(autouse=True)
def wired(monkeypatch, services):
    monkeypatch.setattr(cli, "get_services", lambda: services)
    # wide enough that table cells never wrap
    monkeypatch.setattr(cli, "console", Console(width=200))
    return services


def test_loads_empty():
    result = runner.invoke(cli.app, ["loads"])

    assert result.exit_code == 0
    assert "No available loads." in result.output


def test_post_accept_cancel_flow(wired, shipper, registered_driver):
    result = runner.invoke(cli.app, [
        "post-load", shipper.id, "--from", "Riyadh", "--to", "Jeddah", "-w", "1000", "-p", "500",
    ])
    assert result.exit_code == 0, result.output
    assert "Load posted" in result.output

    load = wired.loads.get_loads()[0]
    assert (load.weight, load.price) == (1000, 500)

    result = runner.invoke(cli.app, ["accept", load.id, registered_driver.id])
    assert result.exit_code == 0, result.output
    assert "in_progress" in result.output

    result = runner.invoke(cli.app, ["loads"])
    assert "No available loads." in result.output

    result = runner.invoke(cli.app, ["cancel", load.id, registered_driver.id])
    assert result.exit_code == 0, result.output
    assert wired.loads.get_load_by_id(load.id).status == "available"


def test_post_load_as_driver_fails(driver):
    result = runner.invoke(cli.app, ["post-load", driver.id, "--from", "Riyadh", "--to", "Jeddah"])

    assert result.exit_code == 1
    assert "FORBIDDEN" in result.output


def test_post_load_rejects_blank_origin(shipper):
    result = runner.invoke(cli.app, ["post-load", shipper.id, "--from", " ", "--to", "Jeddah"])

    assert result.exit_code == 1
    assert "Invalid load" in result.output


def test_show_unknown_load():
    result = runner.invoke(cli.app, ["show", "missing"])

    assert result.exit_code == 1
    assert "NOT_FOUND" in result.output


def test_complete_and_history(wired, shipper, registered_driver, riyadh_jeddah):
    load = wired.loads.post_load(shipper.id, riyadh_jeddah)
    wired.loads.accept_load(load.id, registered_driver.id)

    result = runner.invoke(cli.app, ["complete", load.id, registered_driver.id])
    assert result.exit_code == 0, result.output
    assert "completed" in result.output

    result = runner.invoke(cli.app, ["history", registered_driver.id])
    assert result.exit_code == 0
    assert load.id[:8] in result.output


def test_drivers_shows_pending_setup(registered_driver, second_driver):
    result = runner.invoke(cli.app, ["drivers"])

    assert result.exit_code == 0
    assert "trella" in result.output
    assert "pending setup" in result.output


def test_stats(shipper, driver):
    result = runner.invoke(cli.app, ["stats"])

    assert result.exit_code == 0
    assert "Total Users" in result.output


def test_driver_stats(registered_driver):
    result = runner.invoke(cli.app, ["stats", "--driver", registered_driver.id])

    assert result.exit_code == 0
    assert "Completed Trips" in result.output


def test_post_load_with_truck_type(wired, shipper):
    result = runner.invoke(cli.app, [
        "post-load", shipper.id, "--from", "Riyadh", "--to", "Jeddah", "--truck-type", "dyna",
    ])

    assert result.exit_code == 0, result.output
    assert wired.loads.get_loads()[0].truck_type_required == "dyna"


def test_post_load_rejects_unknown_truck_type(wired, shipper):
    result = runner.invoke(cli.app, [
        "post-load", shipper.id, "--from", "Riyadh", "--to", "Jeddah", "--truck-type", "spaceship",
    ])

    assert result.exit_code != 0
    assert wired.loads.get_loads() == []
