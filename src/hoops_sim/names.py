from __future__ import annotations

import random

FIRST_NAMES = [
    "Aaron", "Andre", "Anthony", "Austin", "Bam", "Bennett", "Brandon", "Brook", "Caleb", "Cam",
    "Cedric", "Chris", "Collin", "Cory", "Damian", "Darius", "Davion", "DeAndre", "Derrick", "Desmond",
    "Devin", "Dillon", "Donovan", "Dorian", "Elijah", "Evan", "Franz", "Gary", "Grant", "Harrison",
    "Isaiah", "Jalen", "Jamal", "Jaren", "Jarrett", "Jaylen", "Jerami", "Jordan", "Josh", "Julius",
    "Justin", "Kai", "Keegan", "Kelly", "Kendrick", "Khris", "Kyle", "Lamar", "Lonzo", "Luka",
    "Malik", "Marcus", "Mikal", "Miles", "Monte", "Naz", "Nikola", "Obi", "Onyeka", "Paolo",
    "Quentin", "RJ", "Reggie", "Rui", "Scottie", "Shai", "Spencer", "Terance", "Trey", "Tyrese",
    "Victor", "Walker", "Wendell", "Xavier", "Zach", "Zion",
]

LAST_NAMES = [
    "Adams", "Allen", "Anderson", "Bailey", "Banks", "Barnes", "Bell", "Bridges", "Brooks", "Brown",
    "Bryant", "Caldwell", "Carter", "Clark", "Coleman", "Collins", "Cunningham", "Daniels", "Davis", "Dixon",
    "Edwards", "Ellis", "Fields", "Fleming", "Ford", "Fox", "Gibson", "Gordon", "Graham", "Grant",
    "Green", "Griffin", "Hamilton", "Harris", "Hart", "Hayes", "Henderson", "Holiday", "Howard", "Hunter",
    "Irving", "Jackson", "James", "Jenkins", "Johnson", "Jones", "Kennedy", "King", "Lawson", "Lewis",
    "Marshall", "Mason", "Mitchell", "Moore", "Morris", "Murray", "Nelson", "Owens", "Parker", "Payton",
    "Porter", "Powell", "Randle", "Reed", "Robinson", "Ross", "Russell", "Sanders", "Simmons", "Smith",
    "Stewart", "Thomas", "Thompson", "Tucker", "Turner", "Walker", "Wallace", "Warren", "Washington", "Watson",
    "White", "Wiggins", "Williams", "Wilson", "Wright", "Young",
]


class NameGenerator:
    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)
        self._used: set[tuple[str, str]] = set()
        self._pool = [(first, last) for first in FIRST_NAMES for last in LAST_NAMES]
        self._rng.shuffle(self._pool)
        self._idx = 0

    def reserve(self, names: list[tuple[str, str]]) -> None:
        self._used.update(names)

    def next_name(self) -> tuple[str, str]:
        while self._idx < len(self._pool):
            name = self._pool[self._idx]
            self._idx += 1
            if name not in self._used:
                self._used.add(name)
                return name

        suffix = 2
        while True:
            first, last = self._pool[self._rng.randrange(0, len(self._pool))]
            candidate = (first, f"{last} {suffix}")
            if candidate not in self._used:
                self._used.add(candidate)
                return candidate
            suffix += 1
