import unittest

from gondola_store.leaderboard import (
    ANONYMOUS,
    InvalidLeaderboardRecord,
    build_leaderboard,
    paginate_leaderboard,
    top_token_holders,
    top_tippers,
    top_traders,
)


def tip(user_id: str, amount, status: str = "completed", username=None):
    return {"userId": user_id, "username": username or user_id, "amount": amount, "status": status}


class TipperTests(unittest.TestCase):
    def test_sums_completed_tips_only(self) -> None:
        board = top_tippers(
            [
                tip("ana", "5.50"),
                tip("ben", "3.00"),
                tip("ana", "2.25"),
                tip("ben", "40", status="pending"),
                tip("cal", 1, status="failed"),
            ]
        )

        self.assertEqual([(e.user_id, e.value) for e in board], [("ana", 7.75), ("ben", 3.0)])
        self.assertEqual([e.rank for e in board], [1, 2])

    def test_missing_username_reads_anonymous(self) -> None:
        board = top_tippers([{"userId": "u1", "amount": "1", "status": "completed"}])

        self.assertEqual(board[0].username, ANONYMOUS)

    def test_first_seen_username_is_kept(self) -> None:
        board = top_tippers([tip("u1", "1", username="old"), tip("u1", "2", username="new")])

        self.assertEqual(board[0].username, "old")

    def test_rejects_unreadable_amounts(self) -> None:
        for amount in ("lots", True, "nan"):
            with self.subTest(amount=amount):
                with self.assertRaises(InvalidLeaderboardRecord):
                    top_tippers([tip("u1", amount)])


class TraderTests(unittest.TestCase):
    def test_trade_counts_for_both_sides(self) -> None:
        board = top_traders(
            [
                {"senderId": "a", "senderUsername": "amy", "receiverId": "b", "receiverUsername": "bo", "tokens": 30},
                {"senderId": "c", "receiverId": "a", "receiverUsername": "amy", "tokens": 10},
            ]
        )

        totals = {e.user_id: (e.username, e.value) for e in board}
        self.assertEqual(totals, {"a": ("amy", 40), "b": ("bo", 30), "c": (ANONYMOUS, 10)})
        self.assertEqual(board[0].user_id, "a")

    def test_trade_without_receiver_is_rejected(self) -> None:
        with self.assertRaises(InvalidLeaderboardRecord):
            top_traders([{"senderId": "a", "tokens": 5}])


class TokenHolderTests(unittest.TestCase):
    def test_only_positive_balances_are_listed(self) -> None:
        board = top_token_holders(
            [
                {"id": "u1", "username": "rich", "tokenBalance": 900},
                {"id": "u2", "username": "broke", "tokenBalance": 0},
                {"id": "u3", "username": "owes", "tokenBalance": -5},
                {"id": "u4", "username": "some", "tokenBalance": "45"},
            ]
        )

        self.assertEqual([e.username for e in board], ["rich", "some"])

    def test_ties_keep_input_order(self) -> None:
        board = top_token_holders(
            [
                {"id": "u1", "tokenBalance": 10},
                {"id": "u2", "tokenBalance": 50},
                {"id": "u3", "tokenBalance": 10},
            ]
        )

        self.assertEqual([e.user_id for e in board], ["u2", "u1", "u3"])
        self.assertEqual([e.rank for e in board], [1, 2, 3])


class BuildLeaderboardTests(unittest.TestCase):
    def test_dispatches_on_kind(self) -> None:
        users = [{"id": "u1", "username": "x", "tokenBalance": 3}]

        self.assertEqual(build_leaderboard("tokens", users)[0].value, 3)
        self.assertEqual(build_leaderboard("tippers", []), [])

    def test_rejects_unknown_kind_and_non_objects(self) -> None:
        with self.assertRaises(InvalidLeaderboardRecord):
            build_leaderboard("karma", [])
        with self.assertRaises(InvalidLeaderboardRecord):
            build_leaderboard("tokens", ["u1"])


class PaginateLeaderboardTests(unittest.TestCase):
    def setUp(self) -> None:
        self.entries = top_token_holders(
            [{"id": f"u{i}", "tokenBalance": 100 - i} for i in range(23)]
        )

    def test_slices_requested_page(self) -> None:
        board = paginate_leaderboard(self.entries, 3, 5)

        self.assertEqual([e.rank for e in board.entries], [11, 12, 13, 14, 15])
        self.assertEqual(board.state.total_pages, 5)
        self.assertEqual(board.window, [1, 2, 3, 4, 5])
        self.assertEqual(board.total_entries, 23)

    def test_out_of_range_page_is_clamped(self) -> None:
        board = paginate_leaderboard(self.entries, 99, 5)

        self.assertEqual(board.state.page, 5)
        self.assertEqual([e.rank for e in board.entries], [21, 22, 23])
        self.assertFalse(board.state.has_next)

    def test_empty_board(self) -> None:
        board = paginate_leaderboard([], 1, 5)

        self.assertEqual(board.entries, [])
        self.assertEqual(board.window, [])
        self.assertFalse(board.state.has_previous)


if __name__ == "__main__":
    unittest.main()
