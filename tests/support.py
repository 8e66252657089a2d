import json
from dataclasses import replace

from study_companion.config import AppConfig
from study_companion.services.storage_service import StoredBlob

PHOTOSYNTHESIS_NOTES = " ".join([
    "Photosynthesis is the process by which green plants convert light energy into chemical energy.",
    "The mechanism begins when chlorophyll in the thylakoid membranes absorbs photons of red and blue light.",
    "In the first stage, the light-dependent reactions split water molecules and release oxygen as a by-product.",
    "This step also produces ATP and NADPH, which carry energy forward to the next phase of the process.",
    "The second stage is the Calvin cycle, which takes place in the stroma of the chloroplast.",
    "During the Calvin cycle the enzyme RuBisCO fixes carbon dioxide from the air onto a five-carbon sugar.",
    "The result is a series of three-carbon molecules that are later assembled into glucose.",
    "Plants use glucose for cellular respiration, for building cellulose, and for storing energy as starch.",
    "Light intensity, carbon dioxide concentration and temperature all limit the rate of photosynthesis.",
    "A classic example is a greenhouse, where growers raise carbon dioxide levels to increase crop yield.",
    "The overall chemical equation combines six molecules of carbon dioxide and six molecules of water.",
    "Using light energy, these are turned into one molecule of glucose and six molecules of oxygen.",
    "Understanding this relationship between light, water and carbon dioxide explains why forests matter.",
    "Almost every food chain on Earth depends on the energy captured by photosynthetic organisms.",
    "The significance of the process extends to the atmosphere, because it continually replenishes oxygen.",
    "Scientists study variations such as C4 and CAM photosynthesis, which help plants survive hot, dry climates.",
    "These adaptations reduce water loss while keeping carbon fixation efficient during the day and night.",
    "Students should be able to describe each stage, name the inputs and outputs, and explain the role of chlorophyll.",
])


def build_study_pack_payload(flashcard_count=3, quiz_count=2):
    return {
        "summary": {
            "overview": "Photosynthesis converts light energy into chemical energy stored in glucose.",
            "keyPoints": ["Light reactions make ATP and NADPH", "The Calvin cycle fixes carbon dioxide"],
            "definitions": [{"term": "Chlorophyll", "definition": "Pigment that absorbs light"}],
            "importantConcepts": ["Energy conversion", "Carbon fixation"],
        },
        "flashcards": [
            {"question": f"Flashcard question {index}", "answer": f"Flashcard answer {index}"}
            for index in range(flashcard_count)
        ],
        "quiz": [
            {
                "question": f"Quiz question {index}",
                "options": ["Oxygen", "Glucose", "Nitrogen", "Helium"],
                "correct": 1,
                "explanation": "Glucose is the sugar produced.",
            }
            for index in range(quiz_count)
        ],
    }


class FakeGenerationClient:
    def __init__(self, responses=None, ping_response='{"status": "working"}'):
        self.responses = list(responses or [json.dumps(build_study_pack_payload())])
        self.ping_response = ping_response
        self.prompts = []
        self.options = []
        self.ping_calls = 0

    def generate(self, prompt, options):
        self.prompts.append(prompt)
        self.options.append(options)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    def ping(self, timeout_ms=10000):
        self.ping_calls += 1
        if isinstance(self.ping_response, Exception):
            raise self.ping_response
        return self.ping_response


class FakeStorage:
    def __init__(self):
        self.uploads = []

    def upload(self, buffer, filename, content_type):
        self.uploads.append((buffer, filename, content_type))
        return StoredBlob(
            url=f"https://storage.googleapis.com/test-bucket/uploads/{filename}",
            name=f"uploads/{filename}",
            size=len(buffer),
        )


def make_config(**overrides):
    base = AppConfig(
        environment="test",
        gemini_api_key="AIzaTestKey",
        firebase_credentials_path="/nonexistent/firebase-credentials.json",
    )
    return replace(base, **overrides)


