from .models import db, Company, ProgrammingLanguage, Topic, Question, LanguageTutorial

COMPANIES = [
    {"name": "Google", "slug": "google", "color": "#4285f4"},
    {"name": "Amazon", "slug": "amazon", "color": "#ff9900"},
    {"name": "Microsoft", "slug": "microsoft", "color": "#00bcf2"},
    {"name": "Meta", "slug": "meta", "color": "#1877f2"},
    {"name": "Apple", "slug": "apple", "color": "#007aff"},
]

LANGUAGES = [
    {
        "name": "Python",
        "slug": "python",
        "icon": "🐍",
        "color": "#3776ab",
        "syntax_highlight": "python",
        "description": "Perfect for beginners, data science, and backend development. Easy to learn with clean syntax.",
    },
    {
        "name": "JavaScript",
        "slug": "javascript",
        "icon": "⚡",
        "color": "#f7df1e",
        "syntax_highlight": "javascript",
        "description": "Essential for web development, frontend frameworks, and modern full-stack applications.",
    },
    {
        "name": "Java",
        "slug": "java",
        "icon": "☕",
        "color": "#ed8b00",
        "syntax_highlight": "java",
        "description": "Industry standard for enterprise applications, Android development, and large-scale systems.",
    },
    {
        "name": "C++",
        "slug": "cpp",
        "icon": "⚙️",
        "color": "#00599c",
        "syntax_highlight": "cpp",
        "description": "High-performance computing, system programming, and competitive programming.",
    },
    {
        "name": "TypeScript",
        "slug": "typescript",
        "icon": "📘",
        "color": "#3178c6",
        "syntax_highlight": "typescript",
        "description": "Strongly typed JavaScript for large-scale applications and better developer experience.",
    },
    {
        "name": "Go",
        "slug": "go",
        "icon": "🐹",
        "color": "#00add8",
        "syntax_highlight": "go",
        "description": "Modern language for cloud computing, microservices, and concurrent programming.",
    },
]

TOPICS = [
    {"name": "Arrays", "slug": "arrays"},
    {"name": "Linked Lists", "slug": "linked-lists"},
    {"name": "Trees & Graphs", "slug": "trees-graphs"},
    {"name": "Dynamic Programming", "slug": "dynamic-programming"},
    {"name": "Sorting & Searching", "slug": "sorting-searching"},
]

# (company slug, topic slug, question fields)
QUESTIONS = [
    (
        "google",
        "arrays",
        {
            "title": "Two Sum",
            "slug": "two-sum",
            "description": "Given an array of integers nums and an integer target, return indices of the "
            "two numbers such that they add up to target.",
            "difficulty": "Easy",
            "time_complexity": "O(n)",
            "space_complexity": "O(n)",
            "hints": ["Try storing values you have already seen.", "A hash map gives O(1) lookups."],
            "test_cases": [
                {"input": "[2,7,11,15], 9", "expected": "[0,1]"},
                {"input": "[3,2,4], 6", "expected": "[1,2]"},
                {"input": "[3,3], 6", "expected": "[0,1]"},
            ],
        },
    ),
    (
        "google",
        "linked-lists",
        {
            "title": "Valid Parentheses",
            "slug": "valid-parentheses",
            "description": "Given a string s containing just the characters '(', ')', '{', '}', '[' and ']', "
            "determine if the input string is valid.",
            "difficulty": "Easy",
            "time_complexity": "O(n)",
            "space_complexity": "O(n)",
            "hints": ["Use a stack.", "Every closing bracket must match the most recent opening one."],
            "test_cases": [
                {"input": '"()"', "expected": "true"},
                {"input": '"()[]{}"', "expected": "true"},
                {"input": '"(]"', "expected": "false"},
            ],
        },
    ),
    (
        "amazon",
        "dynamic-programming",
        {
            "title": "Maximum Subarray",
            "slug": "maximum-subarray",
            "description": "Find the contiguous subarray with the largest sum using Kadane's algorithm.",
            "difficulty": "Medium",
            "time_complexity": "O(n)",
            "space_complexity": "O(1)",
            "hints": ["Track the best sum ending at each index."],
            "test_cases": [{"input": "[-2,1,-3,4,-1,2,1,-5,4]", "expected": "6"}],
        },
    ),
    (
        "meta",
        "trees-graphs",
        {
            "title": "Binary Tree Level Order",
            "slug": "binary-tree-level-order",
            "description": "Return the level order traversal of a binary tree using BFS algorithm.",
            "difficulty": "Medium",
            "time_complexity": "O(n)",
            "space_complexity": "O(n)",
            "hints": ["Process the tree one level at a time with a queue."],
            "test_cases": [{"input": "[3,9,20,null,null,15,7]", "expected": "[[3],[9,20],[15,7]]"}],
        },
    ),
]

TUTORIALS = {
    "python": [
        {
            "title": "Getting Started with Python",
            "slug": "getting-started",
            "order": 1,
            "difficulty": "Beginner",
            "content": "# Welcome to Python!\n\nLet's start with the classic program:\n\n"
            "```python\nprint(\"Hello, World!\")\n```\n",
        },
        {
            "title": "Control Flow",
            "slug": "control-flow",
            "order": 2,
            "difficulty": "Beginner",
            "content": "# Control Flow\n\n```python\nfor i in range(3):\n    if i % 2 == 0:\n        print(i)\n```\n",
        },
        {
            "title": "Functions and Modules",
            "slug": "functions-modules",
            "order": 3,
            "difficulty": "Intermediate",
            "content": "# Functions and Modules\n\n```python\ndef greet(name):\n    return f\"Hello, {name}!\"\n```\n",
        },
    ],
}


def _ensure(model, fields):
    row = model.query.filter_by(slug=fields["slug"]).first()
    if row is None:
        row = model(**fields)
        db.session.add(row)
        db.session.flush()
    return row


def seed_reference_data():
    """Insert the reference catalogue; rows whose slug already exists are left untouched."""
    companies = {c["slug"]: _ensure(Company, c) for c in COMPANIES}
    languages = {lang["slug"]: _ensure(ProgrammingLanguage, lang) for lang in LANGUAGES}
    topics = {t["slug"]: _ensure(Topic, t) for t in TOPICS}

    for company_slug, topic_slug, fields in QUESTIONS:
        _ensure(Question, {**fields, "company_id": companies[company_slug].id, "topic_id": topics[topic_slug].id})

    for language_slug, tutorials in TUTORIALS.items():
        language = languages[language_slug]
        for tutorial in tutorials:
            if not LanguageTutorial.query.filter_by(language_id=language.id, slug=tutorial["slug"]).first():
                db.session.add(LanguageTutorial(language_id=language.id, **tutorial))

    db.session.commit()
