import unittest
from importlib import util as importlib_util

FPDF_AVAILABLE = importlib_util.find_spec("fpdf") is not None
if FPDF_AVAILABLE:
    from gondola_store.statement import render_statement, statement_page_count


def purchases(count: int):
    return [
        {
            "id": f"tx-{i}",
            "type": "purchase",
            "tokens": 120,
            "created_at": f"2026-02-01T{i % 24:02d}:00:00Z",
        }
        for i in range(count)
    ]


@unittest.skipUnless(FPDF_AVAILABLE, "fpdf is not installed")
class StatementTests(unittest.TestCase):
    def test_render_statement_returns_pdf_bytes(self) -> None:
        payload = {
            "username": "gondola_fan",
            "balance": 340,
            "transactions": [
                {"id": "a", "type": "purchase", "tokens": 300, "created_at": "2026-01-15"},
                {
                    "id": "b",
                    "type": "trade",
                    "direction": "sent",
                    "tokens": 20,
                    "receiver_username": "zoë",
                    "created_at": "2026-01-16",
                },
            ],
        }

        pdf = render_statement(payload, now="2026-02-01")

        self.assertIsInstance(pdf, bytes)
        self.assertTrue(pdf.startswith(b"%PDF"))
        self.assertGreater(len(pdf), 100)

    def test_render_statement_without_transactions(self) -> None:
        pdf = render_statement({"username": "new_user"})

        self.assertTrue(pdf.startswith(b"%PDF"))

    def test_long_statement_spans_pages(self) -> None:
        self.assertEqual(statement_page_count(0), 1)
        self.assertEqual(statement_page_count(28), 1)
        self.assertEqual(statement_page_count(29), 2)
        self.assertEqual(statement_page_count(61), 2)
        self.assertEqual(statement_page_count(62), 3)

        short_pdf = render_statement({"username": "whale", "transactions": purchases(5)})
        long_pdf = render_statement({"username": "whale", "transactions": purchases(70)})

        self.assertTrue(long_pdf.startswith(b"%PDF"))
        self.assertGreater(len(long_pdf), len(short_pdf))


if __name__ == "__main__":
    unittest.main()
