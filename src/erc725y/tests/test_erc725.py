import json
from pathlib import Path
import tempfile
import unittest

from erc725y.config import DEFAULT_IPFS_GATEWAY, ERC725Config
from erc725y.erc725 import ERC725
from erc725y.errors import ProviderError
from erc725y.sources import InMemoryDataSource


MY_KEY = {
    "name": "MyKeyName",
    "key": "0x35e6950bc8d21a1699e58328a3c4066df5803bb0b570d0150cb3819288e764b2",
    "keyType": "Singleton",
    "valueType": "string",
    "valueContent": "String",
}
LEGACY_PROFILE = {
    "name": "LSP3Profile",
    "key": "0x5ef83ad9559033e6e941db7d7c495acdce616347d28e90c7ce47cbfcfcad3bc5",
    "keyType": "Singleton",
    "valueType": "bytes",
    "valueContent": "JSONURL",
}


class TestConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        config = ERC725Config.from_env({})
        self.assertEqual(config.ipfs_gateway, DEFAULT_IPFS_GATEWAY)
        self.assertIsNone(config.schema_dir)
        self.assertFalse(config.use_schema_cache)

    def test_environment(self) -> None:
        config = ERC725Config.from_env(
            {
                "ERC725Y_IPFS_GATEWAY": "https://gw.example/ipfs/",
                "ERC725Y_SCHEMA_DIR": "/srv/schemas",
                "ERC725Y_SCHEMA_CACHE_DIR": "/tmp/erc725y-cache",
                "ERC725Y_USE_SCHEMA_CACHE": "Yes",
            }
        )
        self.assertEqual(config.ipfs_gateway, "https://gw.example/ipfs/")
        self.assertEqual(config.schema_dir, Path("/srv/schemas"))
        self.assertEqual(config.schema_cache_dir, Path("/tmp/erc725y-cache"))
        self.assertTrue(config.use_schema_cache)

    def test_invalid_values(self) -> None:
        with self.assertRaisesRegex(ValueError, "boolean flag"):
            ERC725Config.from_env({"ERC725Y_USE_SCHEMA_CACHE": "maybe"})
        with self.assertRaisesRegex(ValueError, "http"):
            ERC725Config(ipfs_gateway="ftp://gw.example")
        with self.assertRaises(ValueError):
            ERC725Config(use_schema_cache="yes")


class TestERC725(unittest.TestCase):
    def test_encode_and_decode(self) -> None:
        erc725 = ERC725([MY_KEY], config=ERC725Config())
        encoded = erc725.encode_data([{"keyName": "MyKeyName", "value": "hi"}])
        self.assertEqual(encoded.values, ("0x6869",))
        [decoded] = erc725.decode_data([{"keyName": MY_KEY["key"], "value": "0x6869"}])
        self.assertEqual(decoded.value, "hi")
        self.assertEqual(decoded.name, "MyKeyName")

    def test_schemas_can_be_overridden_per_call(self) -> None:
        erc725 = ERC725(config=ERC725Config())
        encoded = erc725.encode_data({"keyName": "MyKeyName", "value": "hi"}, schemas=[MY_KEY])
        self.assertEqual(encoded.keys, (MY_KEY["key"],))

    def test_deprecated_content_warns(self) -> None:
        with self.assertWarns(DeprecationWarning):
            ERC725([LEGACY_PROFILE], config=ERC725Config())

    def test_get_schema_includes_builtin_and_instance_schemas(self) -> None:
        erc725 = ERC725([MY_KEY], config=ERC725Config())
        self.assertEqual(erc725.get_schema(MY_KEY["key"]).name, "MyKeyName")
        self.assertEqual(
            erc725.get_schema("0xdf30dba06db6a30e65354d9a64c609861f089545ca58c6b4dbe31a5f338cb0e3").name,
            "AddressPermissions[]",
        )

    def test_schema_dir(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            Path(tmp, "custom.json").write_text(json.dumps([MY_KEY]), encoding="utf-8")
            erc725 = ERC725(config=ERC725Config(schema_dir=tmp))
        self.assertEqual([entry.name for entry in erc725.schemas], ["MyKeyName"])

    def test_schema_cache(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config = ERC725Config(schema_cache_dir=tmp, use_schema_cache=True)
            ERC725([MY_KEY], config=config)
            later = ERC725(config=config)
            self.assertEqual([entry.name for entry in later.schemas], ["MyKeyName"])

    def test_source_backed_calls(self) -> None:
        source = InMemoryDataSource({MY_KEY["key"]: "0x6869"}, interfaces=["ERC725Y"])
        erc725 = ERC725([MY_KEY], source=source, config=ERC725Config())
        [entry] = erc725.get_data(["MyKeyName"])
        self.assertEqual(entry.value, "hi")
        self.assertTrue(erc725.supports_interface("ERC725Y"))
        with self.assertRaisesRegex(ProviderError, "ContentFetcher"):
            erc725.fetch_data()

    def test_missing_source(self) -> None:
        erc725 = ERC725([MY_KEY], config=ERC725Config())
        with self.assertRaisesRegex(ProviderError, "No data source"):
            erc725.get_data()

    def test_static_helpers(self) -> None:
        self.assertEqual(ERC725.encode_key_name("MyKeyName"), MY_KEY["key"])
        self.assertEqual(
            ERC725.encode_permissions({"CALL": True}), "0x" + "0" * 60 + "0800"
        )
        self.assertTrue(ERC725.check_permissions("CALL", "0x" + "0" * 60 + "0800"))


if __name__ == "__main__":
    unittest.main()
