"""
Load tests for the lesson viewer API
Uses Locust to exercise the catalog, lesson detail and sandbox endpoints

Run with:
    locust -f performance/locustfile.py --host=http://localhost:4000
"""

import random
from locust import HttpUser, task, between
from faker import Faker

fake = Faker()


class LessonViewer(HttpUser):
    """
    Simulates a learner browsing the catalog and running code
    """
    wait_time = between(1, 3)

    def on_start(self):
        """Fetch the catalog once so later tasks pick real ids"""
        response = self.client.get("/api/lessons", name="/api/lessons")
        self.lesson_ids = [item["id"] for item in response.json()] if response.status_code == 200 else []

    @task(5)
    def list_lessons(self):
        self.client.get("/api/lessons", name="/api/lessons")

    @task(4)
    def view_lesson(self):
        """Open a lesson, as the lesson page does"""
        if not self.lesson_ids:
            return
        lesson_id = random.choice(self.lesson_ids)
        self.client.get(f"/api/lessons/{lesson_id}", name="/api/lessons/{id}")

    @task(2)
    def open_lesson_page(self):
        if not self.lesson_ids:
            return
        lesson_id = random.choice(self.lesson_ids)
        self.client.get(f"/lessons/{lesson_id}", name="/lessons/{id}")

    @task(2)
    def run_code(self):
        """Build a runner document for a small program"""
        code = f"print({fake.word()!r}.toUpperCase())\n" * random.randint(1, 20)
        self.client.post("/api/sandbox", json={"code": code}, name="/api/sandbox")

    @task(1)
    def missing_lesson(self):
        """Lookups for ids that do not exist should stay cheap 404s"""
        with self.client.get(
            f"/api/lessons/{random.randint(10000, 99999)}",
            name="/api/lessons/{missing}",
            catch_response=True,
        ) as response:
            if response.status_code == 404:
                response.success()
            else:
                response.failure(f"expected 404, got {response.status_code}")
