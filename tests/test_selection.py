import random
import unittest

from watchlist_picker import (
    Film,
    InvalidCountError,
    format_films_response,
    parse_count,
    select_random_films,
)


def make_films(n):
    return [Film(id=str(i), title=f"Film {i}", year="", url=f"https://x/{i}") for i in range(n)]


class TestSelectRandomFilms(unittest.TestCase):
    def test_count_at_or_above_size_returns_permutation(self) -> None:
        films = make_films(5)
        for count in (5, 6, 100):
            picked = select_random_films(list(films), count, random.Random(count))
            self.assertEqual(len(picked), 5)
            self.assertCountEqual([f.id for f in picked], [f.id for f in films])

    def test_partial_pick_has_distinct_members(self) -> None:
        films = make_films(20)
        picked = select_random_films(list(films), 7, random.Random(1))

        ids = [f.id for f in picked]
        self.assertEqual(len(ids), 7)
        self.assertEqual(len(set(ids)), 7)
        self.assertTrue(set(ids) <= {f.id for f in films})

    def test_non_positive_count_is_empty(self) -> None:
        self.assertEqual(select_random_films(make_films(3), 0), [])
        self.assertEqual(select_random_films(make_films(3), -2), [])

    def test_empty_collection(self) -> None:
        self.assertEqual(select_random_films([], 3), [])

    def test_output_length_is_deterministic(self) -> None:
        for size in (0, 1, 4):
            for count in (-1, 0, 1, 3, 10):
                picked = select_random_films(make_films(size), count)
                self.assertEqual(len(picked), min(max(count, 0), size))

    def test_shuffles_input_in_place(self) -> None:
        films = make_films(10)
        picked = select_random_films(films, 10, random.Random(3))
        self.assertEqual([f.id for f in films], [f.id for f in picked])


class TestFormatFilmsResponse(unittest.TestCase):
    def test_single_film_from_watchlist(self) -> None:
        film = Film(title="Dune", year="2021", url="https://x/dune")
        self.assertEqual(
            format_films_response([film], "watchlist", "alice"),
            "Рандомный фильм из вашего Watchlist:\n\nDune (2021)\nhttps://x/dune",
        )

    def test_single_film_from_named_list_without_year(self) -> None:
        film = Film(title="Stalker", url="https://x/stalker")
        text = format_films_response([film], "Top 10", "bob")

        self.assertEqual(
            text,
            "Рандомный фильм из списка 'Top 10' пользователя bob:\n\nStalker\nhttps://x/stalker",
        )
        self.assertNotIn("(", text)

    def test_plural_is_numbered_in_given_order(self) -> None:
        films = [
            Film(title="Dune", year="2021", url="https://x/dune"),
            Film(title="Alien", year="1979", url="https://x/alien"),
            Film(title="Heat", url="https://x/heat"),
        ]
        text = format_films_response(films, "watchlist", "alice")

        self.assertEqual(
            text,
            "Рандомные фильмы из вашего Watchlist:\n\n"
            "1. Dune (2021)\nhttps://x/dune\n\n"
            "2. Alien (1979)\nhttps://x/alien\n\n"
            "3. Heat\nhttps://x/heat",
        )

    def test_plural_named_list_header(self) -> None:
        text = format_films_response(make_films(2), "Best Of", "carol")
        self.assertTrue(text.startswith("Рандомные фильмы из списка 'Best Of' пользователя carol:\n\n1. "))
        self.assertFalse(text.endswith("\n"))


class TestParseCount(unittest.TestCase):
    def test_valid_counts(self) -> None:
        self.assertEqual(parse_count("3"), 3)
        self.assertEqual(parse_count(" 15 "), 15)
        self.assertEqual(parse_count("+2"), 2)

    def test_invalid_counts(self) -> None:
        for text in ("0", "-1", "abc", "2.5", "", "1_000", "٣"):
            with self.assertRaises(InvalidCountError):
                parse_count(text)


if __name__ == "__main__":
    unittest.main()
