"""Built-in STAAR-style questions used when the LLM produces nothing.

Every entry passes validate_question, so fallback output is always
servable as-is.
"""

from __future__ import annotations

import random
from typing import Any

import structlog

from staarkids.core.questions import Question
from staarkids.core.teks import default_category, random_teks_standard

logger = structlog.get_logger(__name__)

QUESTION_BANK: dict[str, dict[int, list[dict[str, Any]]]] = {
    "math": {
        3: [
            {
                "question_text": "Maria collected 84 stickers. She wants to put them in albums with 12 stickers on each page. How many pages will she need?",
                "answer_choices": ["A. 6", "B. 7", "C. 8", "D. 9"],
                "correct_answer": "B",
                "explanation": "Divide the stickers by the number on each page: 84 ÷ 12 = 7 pages needed.",
            },
            {
                "question_text": "A rectangular garden has a length of 8 feet and a width of 5 feet. What is the perimeter of the garden?",
                "answer_choices": ["A. 13 feet", "B. 18 feet", "C. 26 feet", "D. 40 feet"],
                "correct_answer": "C",
                "explanation": "Perimeter = 2 × (length + width) = 2 × (8 + 5) = 26 feet.",
            },
            {
                "question_text": "A rectangle is divided into 8 equal parts and 3 parts are shaded. Which fraction represents the shaded part?",
                "answer_choices": ["A. 3/8", "B. 5/8", "C. 3/5", "D. 8/3"],
                "correct_answer": "A",
                "explanation": "3 out of 8 equal parts are shaded, so the fraction is 3/8.",
            },
            {
                "question_text": "Sarah has 96 baseball cards. She wants to put them into groups of 8. How many groups will she have?",
                "answer_choices": ["A. 10", "B. 11", "C. 12", "D. 13"],
                "correct_answer": "C",
                "explanation": "Divide the cards into groups of 8: 96 ÷ 8 = 12 groups.",
            },
        ],
        4: [
            {
                "question_text": "A bakery sold 1248 muffins on Monday and 2156 muffins on Tuesday. How many muffins did they sell in total?",
                "answer_choices": ["A. 3304", "B. 3404", "C. 3394", "D. 3204"],
                "correct_answer": "B",
                "explanation": "Add the muffins sold on both days: 1248 + 2156 = 3404 muffins.",
            },
            {
                "question_text": "What is 0.75 written as a fraction in simplest form?",
                "answer_choices": ["A. 75/100", "B. 3/4", "C. 7/10", "D. 15/20"],
                "correct_answer": "B",
                "explanation": "The decimal 0.75 means 75 hundredths, or 75/100, which simplifies to 3/4.",
            },
            {
                "question_text": "A square playground has sides that are 15 meters long. What is the area of the playground?",
                "answer_choices": [
                    "A. 60 square meters",
                    "B. 150 square meters",
                    "C. 225 square meters",
                    "D. 30 square meters",
                ],
                "correct_answer": "C",
                "explanation": "Area of a square is side times side: 15 × 15 = 225 square meters.",
            },
            {
                "question_text": "Jake has 2340 stickers. He wants to share them equally among 6 friends. How many stickers will each friend get?",
                "answer_choices": ["A. 390", "B. 380", "C. 400", "D. 350"],
                "correct_answer": "A",
                "explanation": "Divide the stickers equally: 2340 ÷ 6 = 390 stickers per friend.",
            },
        ],
        5: [
            {
                "question_text": "Emma bought 3.5 pounds of apples and 2.75 pounds of oranges. How many pounds of fruit did she buy altogether?",
                "answer_choices": [
                    "A. 5.25 pounds",
                    "B. 6.25 pounds",
                    "C. 6.20 pounds",
                    "D. 5.75 pounds",
                ],
                "correct_answer": "B",
                "explanation": "Add the decimal weights: 3.5 + 2.75 = 6.25 pounds of fruit.",
            },
            {
                "question_text": "What is the product of the fractions 4/5 and 3/8?",
                "answer_choices": ["A. 12/40", "B. 3/10", "C. 7/13", "D. 12/13"],
                "correct_answer": "B",
                "explanation": "Multiply the numerators (4 × 3 = 12) and the denominators (5 × 8 = 40) to get 12/40, which simplifies to 3/10.",
            },
            {
                "question_text": "A rectangular room is 12 feet long and 9 feet wide. If carpet costs $4 per square foot, how much will it cost to carpet the entire room?",
                "answer_choices": ["A. $432", "B. $84", "C. $108", "D. $48"],
                "correct_answer": "A",
                "explanation": "Area = 12 × 9 = 108 square feet. Cost = 108 × 4 = 432 dollars.",
            },
            {
                "question_text": "What is the difference when you subtract 3.45 from 7.8?",
                "answer_choices": ["A. 4.35", "B. 4.45", "C. 3.35", "D. 5.35"],
                "correct_answer": "A",
                "explanation": "Line up the decimal points and subtract: 7.8 - 3.45 = 4.35.",
            },
        ],
    },
    "reading": {
        3: [
            {
                "question_text": "In the story 'The Brave Little Mouse', what lesson does the mouse learn?",
                "answer_choices": [
                    "A. Size doesn't matter when you're brave",
                    "B. Always listen to your parents",
                    "C. Cats and mice can't be friends",
                    "D. It's better to stay home where it's safe",
                ],
                "correct_answer": "A",
                "explanation": "The mouse learns that being small doesn't prevent you from being brave and helping others.",
            },
            {
                "question_text": "Read this sentence from the story: 'The knight's gleaming armor shone in the sunlight.' What does the word 'gleaming' mean?",
                "answer_choices": ["A. Heavy", "B. Shining", "C. Old", "D. Silver"],
                "correct_answer": "B",
                "explanation": "Gleaming means shining brightly, which is supported by 'shone in the sunlight'.",
            },
            {
                "question_text": "In the passage about dolphins, what is the main idea?",
                "answer_choices": [
                    "A. Dolphins are dangerous animals",
                    "B. Dolphins are intelligent sea creatures that live in groups",
                    "C. Dolphins only eat fish",
                    "D. Dolphins can't swim very fast",
                ],
                "correct_answer": "B",
                "explanation": "The passage focuses on dolphins' intelligence and social behavior.",
            },
        ],
        4: [
            {
                "question_text": "According to the passage about recycling, what is the main benefit of recycling paper?",
                "answer_choices": [
                    "A. It saves money for families",
                    "B. It creates jobs for workers",
                    "C. It helps protect forests and trees",
                    "D. It makes paper stronger",
                ],
                "correct_answer": "C",
                "explanation": "The passage emphasizes that recycling paper reduces the need to cut down trees.",
            },
            {
                "question_text": "In the story, why does Jake feel nervous about the science fair?",
                "answer_choices": [
                    "A. He forgot to do his project",
                    "B. He's worried his project isn't good enough",
                    "C. He doesn't like speaking in public",
                    "D. He's afraid of disappointing his teacher",
                ],
                "correct_answer": "B",
                "explanation": "The story shows Jake comparing his project to others and doubting its quality.",
            },
            {
                "question_text": "What can you conclude about the character Rosa based on her actions in the story?",
                "answer_choices": [
                    "A. She is impatient and rushes through things",
                    "B. She is thoughtful and considers others' feelings",
                    "C. She is careless with her belongings",
                    "D. She prefers to work alone",
                ],
                "correct_answer": "B",
                "explanation": "Rosa consistently shows care for others throughout the story.",
            },
        ],
        5: [
            {
                "question_text": "Based on the character's actions throughout the story, what can you conclude about Maya's personality?",
                "answer_choices": [
                    "A. She is selfish and only thinks about herself",
                    "B. She is kind and always helps others in need",
                    "C. She is lazy and avoids doing work",
                    "D. She is dishonest and often lies",
                ],
                "correct_answer": "B",
                "explanation": "Maya consistently helps her classmates and volunteers for community service throughout the story.",
            },
            {
                "question_text": "What is the author's main purpose in writing this article about solar energy?",
                "answer_choices": [
                    "A. To entertain readers with interesting facts",
                    "B. To persuade people to buy solar panels",
                    "C. To inform readers about how solar energy works",
                    "D. To compare solar energy to other energy sources",
                ],
                "correct_answer": "C",
                "explanation": "The article focuses on explaining the process and benefits of solar energy in an informative way.",
            },
            {
                "question_text": "Which sentence from the passage best supports the idea that butterflies are important to nature?",
                "answer_choices": [
                    "A. Butterflies have colorful wings that attract attention",
                    "B. Butterflies help pollinate flowers as they feed on nectar",
                    "C. Butterflies go through a metamorphosis process",
                    "D. Butterflies can be found in many different climates",
                ],
                "correct_answer": "B",
                "explanation": "Pollination is the key ecological role that butterflies play in nature.",
            },
        ],
    },
}


def pattern_questions(
    grade: int,
    subject: str,
    count: int = 5,
    category: str | None = None,
    teks_standard: str | None = None,
    rng: random.Random | None = None,
) -> list[Question]:
    """Draw questions from the built-in bank.

    The bank for the grade is shuffled and cycled, so repeats only happen
    once count exceeds the bank size. Unknown grades fall back to grade 4.
    """
    rng = rng or random.Random()
    by_grade = QUESTION_BANK.get(subject, QUESTION_BANK["math"])
    entries = list(by_grade.get(grade) or by_grade[4])
    rng.shuffle(entries)

    questions = []
    for i in range(count):
        entry = entries[i % len(entries)]
        questions.append(
            Question(
                grade=grade,
                subject=subject,
                teks_standard=teks_standard or random_teks_standard(grade, subject, rng),
                question_text=entry["question_text"],
                answer_choices=list(entry["answer_choices"]),
                correct_answer=entry["correct_answer"],
                explanation=entry["explanation"],
                category=category or default_category(subject),
            )
        )

    logger.info("pattern_questions_drawn", grade=grade, subject=subject, count=len(questions))
    return questions
