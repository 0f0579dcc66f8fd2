from codemaster import create_app
from codemaster.seed import seed_reference_data

app = create_app()

with app.app_context():
    seed_reference_data()
    print("Seeded companies, languages, topics, questions and tutorials.")
