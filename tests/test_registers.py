"""Tests for RegisterService."""

import asyncio
from decimal import Decimal

import pytest

from ferrocash.client import FerroCash
from ferrocash.core.constants import REGISTERS_COLLECTION
from ferrocash.core.exceptions import ConflictError, NotFoundError, ValidationError
from ferrocash.storage.memory import InMemoryStorage


class SlowRegisterStorage(InMemoryStorage):
    """Register reads and writes take long enough for a movement to slip in between."""

    async def get(self, collection, key):
        data = await super().get(collection, key)
        if collection == REGISTERS_COLLECTION:
            await asyncio.sleep(0.05)
        return data

    async def save(self, collection, key, data):
        if collection == REGISTERS_COLLECTION:
            await asyncio.sleep(0.05)
        await super().save(collection, key, data)


class TestRegisterDirectory:
    @pytest.mark.asyncio
    async def test_create_register(self, cash):
        register = await cash.registers.create_register("  Front counter ", "Main till")

        assert register.name == "Front counter"
        assert register.is_active is True
        assert register.current_balance == Decimal("0.00")
        assert register.last_closed_at is None
        assert await cash.registers.get_register(register.id) == register

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, cash):
        with pytest.raises(ValidationError):
            await cash.registers.create_register("   ")

    @pytest.mark.asyncio
    async def test_get_unknown_register(self, cash):
        with pytest.raises(NotFoundError, match="Cash register not found"):
            await cash.registers.get_register("nope")

    @pytest.mark.asyncio
    async def test_list_sorted_and_filtered(self, cash):
        warehouse = await cash.registers.create_register("warehouse")
        await cash.registers.create_register("Counter")
        await cash.registers.deactivate_register(warehouse.id)

        names = [r.name for r in await cash.registers.list_registers()]
        assert names == ["Counter", "warehouse"]

        active = await cash.registers.list_registers(active_only=True)
        assert [r.name for r in active] == ["Counter"]

    @pytest.mark.asyncio
    async def test_update_register(self, cash):
        register = await cash.registers.create_register("Counter")

        updated = await cash.registers.update_register(register.id, name="Counter 1", description="By the door")

        assert updated.name == "Counter 1"
        assert updated.description == "By the door"
        assert updated.current_balance == register.current_balance


class TestActivation:
    @pytest.mark.asyncio
    async def test_cannot_deactivate_with_open_session(self, cash):
        register = await cash.registers.create_register("Counter")
        await cash.open_session(register.id, "100.00", "ana")

        with pytest.raises(ConflictError, match="open session"):
            await cash.registers.deactivate_register(register.id)

        assert (await cash.get_register(register.id)).is_active is True

    @pytest.mark.asyncio
    async def test_deactivate_then_activate(self, cash):
        register = await cash.registers.create_register("Counter")

        assert (await cash.registers.deactivate_register(register.id)).is_active is False
        assert (await cash.registers.activate_register(register.id)).is_active is True

    @pytest.mark.asyncio
    async def test_inactive_register_cannot_open(self, cash):
        register = await cash.registers.create_register("Counter")
        await cash.registers.deactivate_register(register.id)

        with pytest.raises(ValidationError, match="inactive"):
            await cash.open_session(register.id, "0", "ana")


class TestBalanceProjection:
    @pytest.mark.asyncio
    async def test_balance_follows_movements_and_close(self, cash):
        register = await cash.registers.create_register("Counter")
        session = await cash.open_session(register.id, "1000.00", "ana")

        # Opening does not touch the register
        assert (await cash.get_register(register.id)).current_balance == Decimal("0.00")

        await cash.create_movement(session.id, register.id, "sale", "250.00", user_id="ana")
        assert (await cash.get_register(register.id)).current_balance == Decimal("1250.00")

        closed = await cash.close_session(session.id, "1240.00", "ana")
        after = await cash.get_register(register.id)
        assert after.current_balance == Decimal("1240.00")
        assert after.last_closed_at == closed.closed_at

    @pytest.mark.asyncio
    async def test_rename_keeps_balance_written_meanwhile(self, config):
        cash = FerroCash(config=config, storage=SlowRegisterStorage())
        register = await cash.registers.create_register("Counter")
        session = await cash.open_session(register.id, "1000.00", "ana")

        rename = asyncio.create_task(cash.registers.update_register(register.id, name="Renamed"))
        await asyncio.sleep(0)
        movement = await cash.create_movement(session.id, register.id, "income", "500.00", user_id="ana")
        await rename

        after = await cash.get_register(register.id)
        assert movement.running_balance == Decimal("1500.00")
        assert after.current_balance == Decimal("1500.00")
        assert after.name == "Renamed"

    @pytest.mark.asyncio
    async def test_update_unknown_register(self, cash):
        with pytest.raises(NotFoundError):
            await cash.registers.update_register("nope", name="Ghost")
