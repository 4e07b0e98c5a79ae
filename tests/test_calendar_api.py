class TestCalendarEndpoint:
    def seed(self, client):
        tasks = [
            {"title": "A", "dueDate": "2025-06-01", "timeCost": 200, "priority": "high"},
            {"title": "B", "dueDate": "2025-06-01", "timeCost": 150},
            {"title": "C", "dueDate": "2025-06-10"},
            {"title": "D", "dueDate": "2025-06-10", "timeCost": 60},
            {"title": "E", "dueDate": "2025-06-10", "timeCost": 60},
            {"title": "F", "dueDate": "2025-06-10", "timeCost": 60},
            {"title": "July", "dueDate": "2025-07-01", "timeCost": 999},
        ]
        ids = {}
        for payload in tasks:
            res = client.post("/api/tasks", json=payload)
            assert res.status_code == 201
            ids[payload["title"]] = res.json()["task"]["id"]
        return ids

    def test_month_view(self, client):
        self.seed(client)
        res = client.get("/api/calendar?year=2025&month=6&selected=2025-06-10")
        assert res.status_code == 200
        data = res.json()
        assert data["monthName"] == "June"
        assert data["daysInMonth"] == 30
        assert data["leadingBlanks"] == 0
        assert data["previous"] == {"year": 2025, "month": 5}
        assert data["next"] == {"year": 2025, "month": 7}
        assert len(data["days"]) == 30

        first = data["days"][0]
        assert first["date"] == "2025-06-01"
        assert first["totalMinutes"] == 350
        assert first["totalLabel"] == "5 hours 50 min"
        assert first["overLimit"] is True
        assert first["taskCount"] == 2

        tenth = data["days"][9]
        assert tenth["totalMinutes"] == 210
        assert tenth["overLimit"] is False
        assert tenth["taskCount"] == 4
        assert len(tenth["markers"]) == 3
        assert tenth["isSelected"] is True

        empty = data["days"][1]
        assert empty["totalMinutes"] == 0
        assert empty["totalLabel"] == "0 min"
        assert empty["markers"] == []

    def test_completed_tasks_leave_the_workload(self, client):
        ids = self.seed(client)
        client.post(f"/api/tasks/{ids['A']}/toggle")
        day = client.get("/api/calendar?year=2025&month=6").json()["days"][0]
        assert day["totalMinutes"] == 150
        assert day["overLimit"] is False

    def test_other_users_tasks_are_not_counted(self, client):
        self.seed(client)
        data = client.get("/api/calendar?year=2025&month=6", headers={"X-User-Id": "bob"}).json()
        assert all(d["totalMinutes"] == 0 for d in data["days"])

    def test_defaults_to_current_month(self, client):
        data = client.get("/api/calendar").json()
        assert sum(d["isToday"] for d in data["days"]) == 1

    def test_invalid_parameters(self, client):
        assert client.get("/api/calendar?month=13").status_code == 422
        res = client.get("/api/calendar?year=2025&month=6&selected=June-1")
        assert res.status_code == 422
        assert res.json()["error"] == "ValidationError"
