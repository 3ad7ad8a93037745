import unittest

from erc725y.errors import KeyDecodingError, KeyNameError
from erc725y.keys.decode import decode_mapping_key
from erc725y.keys.encode import encode_array_key, encode_dynamic_key_part, encode_key_name
from erc725y.keys.key_name import (
    DynamicKeyPart,
    classify_key_name,
    generate_dynamic_key_name,
    is_dynamic_key_name,
)

CAFE = "0xcafecafecafecafecafecafecafecafecafecafe"
CAFE_CHECKSUM = "0xCAfEcAfeCAfECaFeCaFecaFecaFECafECafeCaFe"
BYTES32 = "0xaaaabbbbccccddddeeeeffff111122223333444455556666777788889999aaaa"


class TestEncodeKeyName(unittest.TestCase):
    def test_singleton_and_array_names_hash_the_whole_name(self) -> None:
        cases = {
            "MyKeyName": "0x35e6950bc8d21a1699e58328a3c4066df5803bb0b570d0150cb3819288e764b2",
            "LSP3Profile": "0x5ef83ad9559033e6e941db7d7c495acdce616347d28e90c7ce47cbfcfcad3bc5",
            "LSP3IssuedAssets[]": "0x3a47ab5bd3a594c3a8995f8fa58d0876c96819ca4516bd76100c92462f2f9dc0",
            "LSP5ReceivedAssets[]": "0x6460ee3c0aac563ccbf76d6e1d07bada78e3a9514e6382b736ed3f478ab7b90b",
            "LSP12IssuedAssets[]": "0x7c8c3416d6cda87cd42c71ea1843df28ac4850354f988d55ee2eaa47b6dc05cd",
        }
        for name, key in cases.items():
            with self.subTest(name=name):
                self.assertEqual(encode_key_name(name), key)

    def test_static_mappings(self) -> None:
        self.assertEqual(
            encode_key_name("SupportedStandards:LSP3Profile"),
            "0xeafec4d89fa9619884b600005ef83ad9559033e6e941db7d7c495acdce616347",
        )
        self.assertEqual(
            encode_key_name(f"MyCoolAddress:{CAFE}"),
            "0x22496f48a493035f0ab40000cafecafecafecafecafecafecafecafecafecafe",
        )
        self.assertEqual(
            encode_key_name("LSP12IssuedAssetsMap:0xb74a88c43bcf691bd7a851f6603cb1868f6fc147"),
            "0x74ac2555c10b9349e78f0000b74a88c43bcf691bd7a851f6603cb1868f6fc147",
        )
        self.assertEqual(
            encode_key_name(f"AddressPermissions:Permissions:{CAFE}"),
            "0x4b80742de2bf82acb3630000cafecafecafecafecafecafecafecafecafecafe",
        )

    def test_dynamic_mappings(self) -> None:
        self.assertEqual(
            encode_key_name("MyDynamicKey:<address>", CAFE),
            "0xd1b2917d26eeeaad5b980000cafecafecafecafecafecafecafecafecafecafe",
        )
        self.assertEqual(
            encode_key_name("MyKeyName:<string>", "MyMapName"),
            "0x35e6950bc8d21a1699e5000075060e3cd7d40450e94d415fb5992ced9ad8f058",
        )
        expected_uint = "0x35e6950bc8d21a1699e50000" + "0" * 32 + "f342d33d"
        self.assertEqual(encode_key_name("MyKeyName:<uint32>", "4081242941"), expected_uint)
        self.assertEqual(encode_key_name("MyKeyName:<uint32>", "0xf342d33d"), expected_uint)
        self.assertEqual(
            encode_key_name("MyKeyName:<bytes4>", "0xabcd1234"),
            "0x35e6950bc8d21a1699e50000abcd1234" + "0" * 32,
        )
        self.assertEqual(
            encode_key_name("MyKeyName:<bytes32>", BYTES32),
            "0x35e6950bc8d21a1699e50000aaaabbbbccccddddeeeeffff1111222233334444",
        )
        self.assertTrue(encode_key_name("MyKeyName:<bool>", True).endswith("0" * 38 + "01"))

    def test_mapping_with_grouping(self) -> None:
        self.assertEqual(
            encode_key_name(f"MyKeyName:MyMapName:<address>", CAFE),
            "0x35e6950bc8d275060e3c0000cafecafecafecafecafecafecafecafecafecafe",
        )
        self.assertEqual(
            encode_key_name("MyKeyName:<bytes2>:<uint32>", ["ffff", "4081242941"]),
            "0x35e6950bc8d2ffff00000000" + "0" * 32 + "f342d33d",
        )
        self.assertEqual(
            encode_key_name(
                "MyKeyName:<address>:<address>",
                ["0xabcdef11ff4ff5d0b8bb9e8e5b06f8c7a7f4ffff", CAFE],
            ),
            "0x35e6950bc8d2abcdef110000cafecafecafecafecafecafecafecafecafecafe",
        )
        self.assertEqual(
            encode_key_name("MyKeyName:<bytes32>:<bool>", [BYTES32, "true"]),
            "0x35e6950bc8d2aaaabbbb0000" + "0" * 38 + "01",
        )
        self.assertEqual(
            encode_key_name("MyKeyName:<bytes32>:MyMapName", BYTES32),
            "0x35e6950bc8d2aaaabbbb000075060e3cd7d40450e94d415fb5992ced9ad8f058",
        )

    def test_legacy_bytes20_names_keep_the_raw_suffix(self) -> None:
        self.assertEqual(
            encode_key_name("MyCoolAddress:cafecafecafecafecafecafecafecafecafecafe"),
            "0x22496f48a493035f00000000cafecafecafecafecafecafecafecafecafecafe",
        )
        self.assertEqual(
            encode_key_name("LSP3IssuedAssetsMap:b74a88C43BCf691bd7A851f6603cb1868f6fc147"),
            "0x83f5e77bfb14241600000000b74a88C43BCf691bd7A851f6603cb1868f6fc147",
        )
        self.assertEqual(
            encode_key_name("AddressPermissions:Permissions:cafecafecafecafecafecafecafecafecafecafe"),
            "0x4b80742d0000000082ac0000cafecafecafecafecafecafecafecafecafecafe",
        )
        self.assertEqual(
            encode_key_name(
                "AddressPermissions:AllowedAddresses:b74a88C43BCf691bd7A851f6603cb1868f6fc147"
            ),
            "0x4b80742d00000000c6dd0000b74a88C43BCf691bd7A851f6603cb1868f6fc147",
        )

    def test_wrong_number_of_dynamic_parts(self) -> None:
        with self.assertRaisesRegex(KeyNameError, "Wrong number of arguments"):
            encode_key_name("MyKeyName:<address>")
        with self.assertRaisesRegex(KeyNameError, "not dynamic"):
            encode_key_name("MyKeyName", CAFE)

    def test_too_many_segments(self) -> None:
        with self.assertRaises(KeyNameError):
            classify_key_name("a:b:c:d")


class TestEncodeDynamicKeyPart(unittest.TestCase):
    def test_vectors(self) -> None:
        self.assertEqual(
            encode_dynamic_key_part("<string>", "HelloHowAreYou", 20),
            "81ca1f336033f64c1b23b11b227c3ba7e87f3f73",
        )
        self.assertEqual(encode_dynamic_key_part("<bool>", "true", 4), "00000001")
        self.assertEqual(
            encode_dynamic_key_part("<address>", "0x7f268357a8c2552623316e2562d90e642bb538e5", 5),
            "7f268357a8",
        )
        self.assertEqual(
            encode_dynamic_key_part("<address>", "7f268357a8c2552623316e2562d90e642bb538e5", 21),
            "007f268357a8c2552623316e2562d90e642bb538e5",
        )
        self.assertEqual(encode_dynamic_key_part("<uint32>", "4081242941", 2), "d33d")
        self.assertEqual(
            encode_dynamic_key_part("<bytes8>", "0xd1b2917d26eeeaad", 12),
            "d1b2917d26eeeaad00000000",
        )

    def test_invalid_values(self) -> None:
        with self.assertRaises(KeyNameError):
            encode_dynamic_key_part("<bytes4>", "0xnothex!", 4)
        with self.assertRaisesRegex(KeyNameError, "too big"):
            encode_dynamic_key_part("<bytes8>", "0x" + "11" * 9, 8)
        with self.assertRaisesRegex(KeyNameError, "too big"):
            encode_dynamic_key_part("<uint8>", "0x100", 1)
        with self.assertRaises(KeyNameError):
            encode_dynamic_key_part("<bool>", "yes", 1)


class TestDynamicNames(unittest.TestCase):
    def test_is_dynamic_key_name(self) -> None:
        self.assertFalse(is_dynamic_key_name("AddressPermissions[]"))
        self.assertTrue(is_dynamic_key_name("LSP5ReceivedAssetsMap:<address>"))
        self.assertTrue(is_dynamic_key_name("<string>"))
        self.assertTrue(is_dynamic_key_name("0x4b80742de2bf82acb3630000<address>"))

    def test_generate_dynamic_key_name(self) -> None:
        address = "0xcafecafecafecafecafecafecafecafecafecafe"
        self.assertEqual(
            generate_dynamic_key_name("MyKey:<bytes4>:<address>", ["0x11223344", address]),
            f"MyKey:0x11223344:{address}",
        )
        self.assertEqual(generate_dynamic_key_name("MyKey:<bool>", True), "MyKey:true")
        with self.assertRaisesRegex(KeyNameError, "not enough dynamicKeyParts"):
            generate_dynamic_key_name("MyKey:<bytes4>:<address>", ["0x11223344"])
        with self.assertRaisesRegex(KeyNameError, "expecting an <address>"):
            generate_dynamic_key_name("MyKey:<address>", "0x1234")


class TestArrayKey(unittest.TestCase):
    def test_element_key_keeps_first_half_of_base(self) -> None:
        base = "0x7c8c3416d6cda87cd42c71ea1843df28ac4850354f988d55ee2eaa47b6dc05cd"
        self.assertEqual(
            encode_array_key(base, 1),
            "0x7c8c3416d6cda87cd42c71ea1843df2800000000000000000000000000000001",
        )
        self.assertEqual(encode_array_key(base, 255)[-2:], "ff")

    def test_array_name_with_index(self) -> None:
        self.assertEqual(
            encode_key_name("LSP12IssuedAssets[]", 1),
            "0x7c8c3416d6cda87cd42c71ea1843df2800000000000000000000000000000001",
        )
        with self.assertRaisesRegex(KeyNameError, "not dynamic"):
            encode_key_name("LSP12IssuedAssets[]", "0x01")

    def test_invalid_index(self) -> None:
        base = "0x" + "11" * 32
        with self.assertRaises(KeyNameError):
            encode_array_key(base, -1)
        with self.assertRaises(KeyNameError):
            encode_array_key(base, 1 << 128)


class TestDecodeMappingKey(unittest.TestCase):
    def test_address(self) -> None:
        key = "0xd1b2917d26eeeaad5b980000cafecafecafecafecafecafecafecafecafecafe"
        self.assertEqual(
            decode_mapping_key(key, "MyDynamicKey:<address>"),
            [DynamicKeyPart("address", CAFE_CHECKSUM)],
        )

    def test_uint_and_bytes(self) -> None:
        key = encode_key_name("MyKeyName:<uint32>", 4081242941)
        self.assertEqual(decode_mapping_key(key, "MyKeyName:<uint32>"), [DynamicKeyPart("uint32", 4081242941)])
        key = encode_key_name("MyKeyName:<bytes2>:<uint32>", ["ffff", "4081242941"])
        self.assertEqual(
            decode_mapping_key(key, "MyKeyName:<bytes2>:<uint32>"),
            [DynamicKeyPart("bytes2", "0xffff"), DynamicKeyPart("uint32", 4081242941)],
        )

    def test_literal_segments_are_skipped(self) -> None:
        key = encode_key_name("MyKeyName:MyMapName:<address>", CAFE)
        parts = decode_mapping_key(key, "MyKeyName:MyMapName:<address>")
        self.assertEqual([part.to_dict() for part in parts], [{"type": "address", "value": CAFE_CHECKSUM}])

    def test_bool(self) -> None:
        key = encode_key_name("MyKeyName:<bytes32>:<bool>", [BYTES32, "true"])
        parts = decode_mapping_key(key, "MyKeyName:<bytes32>:<bool>")
        self.assertEqual(parts[1], DynamicKeyPart("bool", True))
        self.assertEqual(parts[0].value, "0xaaaabbbb")

    def test_string_cannot_be_recovered(self) -> None:
        key = encode_key_name("MyKeyName:<string>", "MyMapName")
        with self.assertRaises(KeyNameError):
            decode_mapping_key(key, "MyKeyName:<string>")

    def test_non_mapping_names_raise(self) -> None:
        key = "0x" + "00" * 32
        with self.assertRaisesRegex(KeyNameError, "at most 3 segments"):
            decode_mapping_key(key, "A:B:C:<address>")
        with self.assertRaisesRegex(KeyNameError, "not a mapping key"):
            decode_mapping_key(key, "Singleton")
        with self.assertRaisesRegex(KeyNameError, "not a mapping key"):
            decode_mapping_key(key, "LSP5ReceivedAssets[]")

    def test_malformed_key(self) -> None:
        with self.assertRaisesRegex(KeyDecodingError, "32 bytes"):
            decode_mapping_key("0x1234", "MyKeyName:<address>")
        with self.assertRaisesRegex(KeyDecodingError, "hexadecimal"):
            decode_mapping_key("0x" + "zz" * 32, "MyKeyName:<address>")


if __name__ == "__main__":
    unittest.main()
