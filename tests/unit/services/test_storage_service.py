"""
Unit Tests for local storage
"""
import pytest

from synexa.services.storage_service import storage_service


class TestStorageService:

    @pytest.mark.asyncio
    async def test_save_read_delete(self):
        path = await storage_service.save("unit", "ficha.txt", b"conteudo")

        assert await storage_service.exists(str(path)) is True
        assert await storage_service.read(str(path)) == b"conteudo"
        assert await storage_service.delete(str(path)) is True
        assert await storage_service.exists(str(path)) is False

    @pytest.mark.asyncio
    async def test_delete_missing_file(self):
        missing = storage_service.path_for("unit", "nao-existe.pdf")

        assert await storage_service.delete(str(missing)) is False
