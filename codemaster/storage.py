from sqlalchemy.dialects import postgresql, sqlite

from .models import (
    db,
    utcnow,
    User,
    Company,
    ProgrammingLanguage,
    Topic,
    Question,
    Solution,
    UserProgress,
    LanguageTutorial,
)

QUESTION_FILTERS = ("company_id", "topic_id", "difficulty")

# backends with a native ON CONFLICT upsert
UPSERT_DIALECTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}


def equality_filters(model, constraints):
    """Turn optional key/value constraints into equality predicates; empty values impose nothing."""
    return [getattr(model, key) == value for key, value in constraints.items() if value]


def _dialect_insert(model):
    return UPSERT_DIALECTS[db.session.get_bind().dialect.name](model)


def _upsert(model, values, keys):
    """INSERT ... ON CONFLICT (keys) DO UPDATE, overwriting every supplied field."""
    changes = {name: value for name, value in values.items() if name not in keys}
    changes["updated_at"] = utcnow()
    stmt = _dialect_insert(model).values(**values)
    stmt = stmt.on_conflict_do_update(index_elements=list(keys), set_=changes)
    db.session.execute(stmt)
    db.session.commit()


class DatabaseStorage:
    """CRUD pass-through to the database. Errors propagate to the caller."""

    # ---- Users
    def get_user(self, user_id):
        return db.session.get(User, user_id)

    def upsert_user(self, data):
        _upsert(User, data, keys=("id",))
        return db.session.get(User, data["id"], populate_existing=True)

    # ---- Companies
    def get_companies(self):
        return Company.query.order_by(Company.name.asc()).all()

    def get_company_by_slug(self, slug):
        return Company.query.filter_by(slug=slug).first()

    def create_company(self, data):
        return self._create(Company, data)

    # ---- Programming languages
    def get_programming_languages(self):
        return ProgrammingLanguage.query.order_by(ProgrammingLanguage.name.asc()).all()

    def get_programming_language_by_slug(self, slug):
        return ProgrammingLanguage.query.filter_by(slug=slug).first()

    def create_programming_language(self, data):
        return self._create(ProgrammingLanguage, data)

    # ---- Topics
    def get_topics(self):
        return Topic.query.order_by(Topic.name.asc()).all()

    def get_topic_by_slug(self, slug):
        return Topic.query.filter_by(slug=slug).first()

    def create_topic(self, data):
        return self._create(Topic, data)

    # ---- Questions
    def get_questions(self, filters=None):
        query = Question.query
        conditions = equality_filters(Question, {k: v for k, v in (filters or {}).items() if k in QUESTION_FILTERS})
        if conditions:
            query = query.filter(*conditions)
        return query.order_by(Question.created_at.desc()).all()

    def get_question(self, question_id):
        return db.session.get(Question, question_id)

    def get_question_by_slug(self, slug):
        return Question.query.filter_by(slug=slug).first()

    def get_questions_by_company(self, company_id):
        return self.get_questions({"company_id": company_id})

    def create_question(self, data):
        return self._create(Question, data)

    # ---- Solutions
    def get_solutions_by_question(self, question_id):
        return Solution.query.filter_by(question_id=question_id).all()

    def get_solution_by_question_and_language(self, question_id, language_id):
        return Solution.query.filter_by(question_id=question_id, language_id=language_id).first()

    def create_solution(self, data):
        return self._create(Solution, data)

    # ---- User progress
    def get_user_progress(self, user_id, question_id):
        return (
            UserProgress.query.filter_by(user_id=user_id, question_id=question_id)
            .populate_existing()
            .first()
        )

    def get_user_progress_by_user(self, user_id):
        return UserProgress.query.filter_by(user_id=user_id).populate_existing().all()

    def upsert_user_progress(self, data):
        _upsert(UserProgress, data, keys=("user_id", "question_id"))
        return self.get_user_progress(data["user_id"], data["question_id"])

    # ---- Language tutorials
    def get_tutorials_by_language(self, language_id):
        return LanguageTutorial.query.filter_by(language_id=language_id).order_by(LanguageTutorial.order.asc()).all()

    def get_tutorial_by_slug(self, language_slug, tutorial_slug):
        return (
            LanguageTutorial.query.join(ProgrammingLanguage, LanguageTutorial.language_id == ProgrammingLanguage.id)
            .filter(ProgrammingLanguage.slug == language_slug, LanguageTutorial.slug == tutorial_slug)
            .first()
        )

    def create_language_tutorial(self, data):
        return self._create(LanguageTutorial, data)

    def _create(self, model, data):
        row = model(**data)
        db.session.add(row)
        db.session.commit()
        return row


storage = DatabaseStorage()
