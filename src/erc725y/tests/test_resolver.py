import unittest

from erc725y.errors import SchemaNotFoundError
from erc725y.schema.resolver import UNKNOWN_MAP_PART, get_schema, resolve_key
from erc725y.schema.types import NamedContent, UnresolvedContent
from erc725y.schemas import builtin_schemas, lsp_schema


LSP3_PROFILE_KEY = "0x5ef83ad9559033e6e941db7d7c495acdce616347d28e90c7ce47cbfcfcad3bc5"
ADDRESS_PERMISSIONS_KEY = "0xdf30dba06db6a30e65354d9a64c609861f089545ca58c6b4dbe31a5f338cb0e3"
CAFE = "cafecafecafecafecafecafecafecafecafecafe"


class TestBuiltinSchemas(unittest.TestCase):
    def test_every_standard_loads(self) -> None:
        entries = builtin_schemas()
        names = {entry.name for entry in entries}
        self.assertIn("LSP3Profile", names)
        self.assertIn("AddressPermissions:AllowedCalls:<address>", names)
        self.assertIn("LSP17Extension:<bytes4>", names)
        self.assertEqual(len(entries), len({(entry.key, entry.name) for entry in entries}))

    def test_unknown_standard(self) -> None:
        with self.assertRaises(SchemaNotFoundError):
            lsp_schema("LSP99")


class TestGetSchema(unittest.TestCase):
    def test_singleton(self) -> None:
        entry = get_schema(LSP3_PROFILE_KEY)
        self.assertEqual(entry.name, "LSP3Profile")
        self.assertEqual(entry.value_content, NamedContent("VerifiableURI"))

    def test_keys_are_case_insensitive(self) -> None:
        self.assertEqual(get_schema(LSP3_PROFILE_KEY.upper().replace("0X", "0x")).name, "LSP3Profile")

    def test_array_base_key(self) -> None:
        entry = get_schema(ADDRESS_PERMISSIONS_KEY)
        self.assertEqual(entry.name, "AddressPermissions[]")
        self.assertEqual(entry.key_type, "Array")

    def test_array_element_key(self) -> None:
        key = ADDRESS_PERMISSIONS_KEY[:34] + "0" * 31 + "5"
        entry = get_schema(key)
        self.assertEqual(entry.name, "AddressPermissions[5]")
        self.assertEqual(entry.key, key)
        self.assertEqual(entry.key_type, "Singleton")
        self.assertEqual(entry.value_type, "address")
        self.assertEqual(entry.value_content, NamedContent("Address"))

    def test_array_element_key_with_hex_index_is_not_resolved(self) -> None:
        self.assertIsNone(get_schema(ADDRESS_PERMISSIONS_KEY[:34] + "0" * 31 + "a"))

    def test_static_mapping(self) -> None:
        key = "0xeafec4d89fa9619884b600005ef83ad9559033e6e941db7d7c495acdce616347"
        entry = get_schema(key)
        self.assertEqual(entry.name, "SupportedStandards:LSP3Profile")
        self.assertEqual(entry.key_type, "Mapping")

    def test_dynamic_mapping_keeps_the_raw_suffix(self) -> None:
        key = "0x812c4334633eb816c80d0000" + CAFE
        entry = get_schema(key)
        self.assertEqual(entry.name, "LSP5ReceivedAssetsMap:" + CAFE)
        self.assertEqual(entry.key, key)
        self.assertEqual(entry.value_type, "(bytes4,uint128)")
        self.assertIsInstance(entry.value_content, UnresolvedContent)

    def test_unknown_mapping_suffix(self) -> None:
        key = "0xeafec4d89fa9619884b60000" + "ff" * 20
        entry = get_schema(key)
        self.assertEqual(entry.name, "SupportedStandards:" + UNKNOWN_MAP_PART)
        self.assertEqual(entry.value_type, "bytes4")

    def test_mapping_with_grouping(self) -> None:
        key = "0x4b80742de2bf82acb3630000" + CAFE
        entry = get_schema(key)
        self.assertEqual(entry.name, "AddressPermissions:Permissions:" + CAFE)
        self.assertEqual(entry.key, key)
        self.assertEqual(entry.key_type, "MappingWithGrouping")
        self.assertEqual(entry.value_content, NamedContent("BitArray"))

    def test_unknown_key(self) -> None:
        self.assertIsNone(get_schema("0x" + "12" * 32))

    def test_many_keys(self) -> None:
        unknown = "0x" + "12" * 32
        result = get_schema([LSP3_PROFILE_KEY, unknown])
        self.assertEqual(set(result), {LSP3_PROFILE_KEY, unknown})
        self.assertEqual(result[LSP3_PROFILE_KEY].name, "LSP3Profile")
        self.assertIsNone(result[unknown])

    def test_provided_schemas(self) -> None:
        custom = {
            "name": "MyKeyName",
            "key": "0x35e6950bc8d21a1699e58328a3c4066df5803bb0b570d0150cb3819288e764b2",
            "keyType": "Singleton",
            "valueType": "string",
            "valueContent": "String",
        }
        self.assertIsNone(get_schema(custom["key"]))
        self.assertEqual(get_schema(custom["key"], [custom]).name, "MyKeyName")


class TestResolveKey(unittest.TestCase):
    def test_only_given_schemas_are_searched(self) -> None:
        self.assertIsNone(resolve_key(LSP3_PROFILE_KEY, lsp_schema("LSP6")))
        self.assertEqual(resolve_key(LSP3_PROFILE_KEY, lsp_schema("LSP3")).name, "LSP3Profile")


if __name__ == "__main__":
    unittest.main()
