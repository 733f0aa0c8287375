import unittest

from gondola_store.pagination import (
    ELLIPSIS,
    clamp_page,
    compute_page_window,
    page,
    page_count,
    page_labels,
    page_slice,
    page_state,
)


def labels(current_page: int, total_pages: int, max_buttons: int = 5):
    return page_labels(compute_page_window(current_page, total_pages, max_buttons))


class PageWindowTests(unittest.TestCase):
    def test_window_centred_on_current_page(self) -> None:
        self.assertEqual(labels(10, 20), [1, "...", 9, 10, 11, "...", 20])

    def test_window_shifted_to_start(self) -> None:
        self.assertEqual(labels(1, 20), [1, 2, 3, "...", 20])
        self.assertEqual(labels(2, 20), [1, 2, 3, "...", 20])

    def test_window_shifted_to_end(self) -> None:
        self.assertEqual(labels(20, 20), [1, "...", 18, 19, 20])
        self.assertEqual(labels(19, 20), [1, "...", 18, 19, 20])

    def test_single_page_gap_is_shown_literally(self) -> None:
        self.assertEqual(labels(3, 20), [1, 2, 3, 4, "...", 20])
        self.assertEqual(labels(4, 20), [1, 2, 3, 4, 5, "...", 20])
        self.assertEqual(labels(17, 20), [1, "...", 16, 17, 18, 19, 20])

    def test_small_page_counts_show_every_page(self) -> None:
        self.assertEqual(labels(2, 3), [1, 2, 3])
        self.assertEqual(labels(1, 5), [1, 2, 3, 4, 5])
        self.assertEqual(labels(5, 5), [1, 2, 3, 4, 5])
        self.assertEqual(labels(1, 1), [1])

    def test_no_pages_yields_empty_window(self) -> None:
        self.assertEqual(compute_page_window(1, 0), [])
        self.assertEqual(compute_page_window(1, -4), [])

    def test_out_of_range_current_page_is_clamped(self) -> None:
        self.assertEqual(labels(0, 20), labels(1, 20))
        self.assertEqual(labels(99, 20), labels(20, 20))

    def test_wider_button_budget(self) -> None:
        self.assertEqual(labels(50, 100, 7), [1, "...", 48, 49, 50, 51, 52, "...", 100])
        self.assertEqual(labels(1, 100, 7), [1, 2, 3, 4, 5, "...", 100])

    def test_small_button_budget_does_not_fail(self) -> None:
        self.assertEqual(labels(5, 10, 1), [1, "...", 5, "...", 10])

    def test_entries_are_typed(self) -> None:
        window = compute_page_window(10, 20)
        self.assertEqual(window[0], page(1))
        self.assertIs(window[1], ELLIPSIS)
        self.assertTrue(window[1].is_ellipsis)
        self.assertFalse(window[2].is_ellipsis)

    def test_window_invariants_hold_for_large_page_counts(self) -> None:
        for max_buttons in (3, 5, 7, 9):
            for total_pages in range(max_buttons + 1, 40):
                for current_page in range(1, total_pages + 1):
                    with self.subTest(
                        current_page=current_page,
                        total_pages=total_pages,
                        max_buttons=max_buttons,
                    ):
                        window = compute_page_window(current_page, total_pages, max_buttons)
                        numbers = [entry.number for entry in window if not entry.is_ellipsis]

                        self.assertEqual(window[0], page(1))
                        self.assertEqual(window[-1], page(total_pages))
                        self.assertIn(current_page, numbers)
                        self.assertEqual(numbers, sorted(set(numbers)))
                        self.assertLessEqual(len(window), max_buttons + 2)

                        for before, entry, after in zip(window, window[1:], window[2:]):
                            if entry.is_ellipsis:
                                self.assertFalse(before.is_ellipsis)
                                self.assertFalse(after.is_ellipsis)
                                self.assertGreater(after.number - before.number, 2)

    def test_window_is_deterministic(self) -> None:
        self.assertEqual(compute_page_window(7, 30), compute_page_window(7, 30))


class PageArithmeticTests(unittest.TestCase):
    def test_page_count_rounds_up(self) -> None:
        self.assertEqual(page_count(0, 5), 0)
        self.assertEqual(page_count(5, 5), 1)
        self.assertEqual(page_count(6, 5), 2)
        self.assertEqual(page_count(51, 25), 3)

    def test_page_count_treats_bad_page_size_as_one(self) -> None:
        self.assertEqual(page_count(3, 0), 3)

    def test_clamp_page(self) -> None:
        self.assertEqual(clamp_page(0, 4), 1)
        self.assertEqual(clamp_page(9, 4), 4)
        self.assertEqual(clamp_page(3, 0), 1)

    def test_page_slice_returns_items_for_page(self) -> None:
        items = list(range(12))
        self.assertEqual(page_slice(items, 1, 5), [0, 1, 2, 3, 4])
        self.assertEqual(page_slice(items, 3, 5), [10, 11])
        self.assertEqual(page_slice(items, 9, 5), [10, 11])
        self.assertEqual(page_slice([], 1, 5), [])

    def test_page_state_navigation_stays_in_range(self) -> None:
        first = page_state(1, 3)
        self.assertFalse(first.has_previous)
        self.assertTrue(first.has_next)
        self.assertEqual(first.previous_page, 1)
        self.assertEqual(first.next_page, 2)

        last = page_state(7, 3)
        self.assertEqual(last.page, 3)
        self.assertTrue(last.has_previous)
        self.assertFalse(last.has_next)
        self.assertEqual(last.next_page, 3)

        empty = page_state(1, 0)
        self.assertEqual(empty.page, 1)
        self.assertFalse(empty.has_next)


if __name__ == "__main__":
    unittest.main()
