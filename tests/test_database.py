import os
import tempfile
import unittest

from db.database import MemoryKeyValueStore, SqliteKeyValueStore
from db.errors import StorageReadError, StorageWriteError


class SqliteKeyValueStoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        # nested directory is created on first connection
        self.db_path = os.path.join(self.temp_dir.name, "data", "kv.sqlite")
        self.kv = SqliteKeyValueStore(self.db_path)

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_missing_key_loads_none(self):
        self.assertIsNone(await self.kv.load("absent"))
        self.assertTrue(os.path.exists(self.db_path))

    async def test_save_overwrites(self):
        await self.kv.save("k", "one")
        await self.kv.save("k", "two")
        self.assertEqual(await self.kv.load("k"), "two")

    async def test_save_many_and_reopen(self):
        await self.kv.save_many({"a": "1", "b": "2"})
        reopened = SqliteKeyValueStore(self.db_path)
        self.assertEqual(await reopened.load("a"), "1")
        self.assertEqual(await reopened.load("b"), "2")

    async def test_unopenable_database_raises_storage_errors(self):
        # a directory cannot be opened as a database file
        kv = SqliteKeyValueStore(self.temp_dir.name)
        with self.assertRaises(StorageWriteError):
            await kv.save("k", "v")
        with self.assertRaises(StorageReadError):
            await kv.load("k")


class MemoryKeyValueStoreTestCase(unittest.IsolatedAsyncioTestCase):
    async def test_roundtrip_and_failures(self):
        kv = MemoryKeyValueStore({"seed": "x"})
        self.assertEqual(await kv.load("seed"), "x")
        self.assertIsNone(await kv.load("other"))

        await kv.save_many({"a": "1", "b": "2"})
        self.assertEqual(kv.data, {"seed": "x", "a": "1", "b": "2"})

        kv.fail_writes = True
        with self.assertRaises(StorageWriteError):
            await kv.save("a", "changed")
        self.assertEqual(await kv.load("a"), "1")
