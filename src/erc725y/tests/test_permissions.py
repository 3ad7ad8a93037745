import unittest

from erc725y.errors import PermissionsError
from erc725y.permissions import (
    ALL_PERMISSIONS_MASK,
    LSP6_DEFAULT_PERMISSIONS,
    PERMISSION_NAMES,
    check_permissions,
    decode_permissions,
    encode_permissions,
    map_permission,
)


def bytes32(number: int) -> str:
    return "0x" + format(number, "064x")


class TestEncodePermissions(unittest.TestCase):
    def test_individual_flags(self) -> None:
        self.assertEqual(encode_permissions({"CHANGEOWNER": True, "CALL": True}), bytes32(0x801))
        self.assertEqual(encode_permissions({"SIGN": True, "DEPLOY": False}), bytes32(0x200000))
        self.assertEqual(encode_permissions({}), bytes32(0))

    def test_all_permissions_is_applied_first(self) -> None:
        self.assertEqual(encode_permissions({"ALL_PERMISSIONS": True}), bytes32(0x7F3F7F))
        self.assertEqual(
            encode_permissions({"CHANGEOWNER": False, "ALL_PERMISSIONS": True}),
            bytes32(0x7F3F7E),
        )
        self.assertEqual(
            encode_permissions({"ALL_PERMISSIONS": True, "DELEGATECALL": True}),
            bytes32(0x7FBF7F),
        )

    def test_unknown_name(self) -> None:
        with self.assertRaisesRegex(PermissionsError, "FLY"):
            encode_permissions({"FLY": True})


class TestDecodePermissions(unittest.TestCase):
    def test_flags(self) -> None:
        decoded = decode_permissions(bytes32(0x801))
        self.assertTrue(decoded["CHANGEOWNER"])
        self.assertTrue(decoded["CALL"])
        self.assertFalse(decoded["SUPER_CALL"])
        self.assertFalse(decoded["ALL_PERMISSIONS"])
        self.assertEqual(set(decoded), set(PERMISSION_NAMES) | {"ALL_PERMISSIONS"})

    def test_all_permissions(self) -> None:
        decoded = decode_permissions(bytes32(ALL_PERMISSIONS_MASK))
        self.assertTrue(decoded["ALL_PERMISSIONS"])
        self.assertTrue(decoded["SIGN"])
        self.assertFalse(decoded["REENTRANCY"])
        self.assertFalse(decoded["DELEGATECALL"])

    def test_round_trip_of_named_flags(self) -> None:
        flags = {"ADDCONTROLLER": True, "SETDATA": True, "EXECUTE_RELAY_CALL": True}
        decoded = decode_permissions(encode_permissions(flags))
        self.assertEqual({name for name, value in decoded.items() if value}, set(flags))

    def test_all_permissions_normalizes(self) -> None:
        self.assertEqual(
            decode_permissions(encode_permissions({"ALL_PERMISSIONS": True})),
            decode_permissions(LSP6_DEFAULT_PERMISSIONS["ALL_PERMISSIONS"]),
        )
        revoked = decode_permissions(encode_permissions({"ALL_PERMISSIONS": True, "CHANGEOWNER": False}))
        self.assertFalse(revoked["CHANGEOWNER"])
        self.assertFalse(revoked["ALL_PERMISSIONS"])

    def test_reserved_bits_are_dropped(self) -> None:
        decoded = decode_permissions("0x" + "f" * 64)
        self.assertTrue(all(decoded.values()))
        self.assertEqual(encode_permissions(decoded), bytes32(0x7FFFFF))

    def test_invalid_hex(self) -> None:
        with self.assertRaises(PermissionsError):
            decode_permissions("0xnothex")


class TestCheckPermissions(unittest.TestCase):
    def test_names(self) -> None:
        granted = encode_permissions({"CALL": True, "SETDATA": True})
        self.assertTrue(check_permissions("CALL", granted))
        self.assertTrue(check_permissions(["CALL", "SETDATA"], granted))
        self.assertFalse(check_permissions(["CALL", "SIGN"], granted))

    def test_hex_requirements(self) -> None:
        granted = bytes32(ALL_PERMISSIONS_MASK)
        self.assertTrue(check_permissions([bytes32(0x1), "SIGN"], granted))
        self.assertFalse(check_permissions("ALL_PERMISSIONS", bytes32(0x7F3F7E)))

    def test_invalid_inputs(self) -> None:
        with self.assertRaisesRegex(PermissionsError, "Invalid grantedPermissions string"):
            check_permissions("CALL", "CALL")
        with self.assertRaisesRegex(PermissionsError, "Invalid permission string: FLY"):
            check_permissions(["CALL", "FLY"], bytes32(0))


class TestMapPermission(unittest.TestCase):
    def test_mapping(self) -> None:
        self.assertEqual(map_permission("SIGN"), bytes32(0x200000))
        self.assertEqual(map_permission("0x01"), "0x01")
        self.assertIsNone(map_permission("FLY"))
        self.assertEqual(LSP6_DEFAULT_PERMISSIONS["ALL_PERMISSIONS"], bytes32(0x7F3F7F))


if __name__ == "__main__":
    unittest.main()
