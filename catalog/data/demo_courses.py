DEMO_COURSES = [
    {"slug": "algebra-basics", "title": "Algebra Basics", "category": "math", "level": "beginner", "price": "120.00", "rating": 4.6, "duration_hours": 12, "published_on": "2025-01-15"},
    {"slug": "linear-algebra", "title": "Linear Algebra", "category": "math", "level": "intermediate", "price": "450.00", "rating": 4.8, "duration_hours": 30, "published_on": "2025-02-03"},
    {"slug": "calculus-i", "title": "Calculus I", "category": "math", "level": "intermediate", "price": "400.00", "rating": 4.5, "duration_hours": 28, "published_on": "2024-09-10"},
    {"slug": "statistics-101", "title": "Statistics 101", "category": "math", "level": "beginner", "price": "250.00", "rating": 4.2, "duration_hours": 16, "published_on": "2024-11-20"},
    {"slug": "python-for-kids", "title": "Python for Kids", "category": "programming", "level": "beginner", "price": "300.00", "rating": 4.9, "duration_hours": 20, "published_on": "2025-03-01"},
    {"slug": "web-apis-with-django", "title": "Web APIs with Django", "category": "programming", "level": "advanced", "price": "900.00", "rating": 4.7, "duration_hours": 40, "published_on": "2025-04-18"},
    {"slug": "rest-fundamentals", "title": "REST Fundamentals", "category": "programming", "level": "intermediate", "price": "350.00", "rating": 4.4, "duration_hours": 10, "published_on": "2025-05-02"},
    {"slug": "scratch-games", "title": "Scratch Games", "category": "programming", "level": "beginner", "price": "100.00", "rating": 4.3, "duration_hours": 8, "published_on": "2024-06-12"},
    {"slug": "robotics-lab", "title": "Robotics Lab", "category": "stem", "level": "intermediate", "price": "1200.00", "rating": 4.8, "duration_hours": 36, "published_on": "2025-01-30"},
    {"slug": "chemistry-at-home", "title": "Chemistry at Home", "category": "stem", "level": "beginner", "price": "200.00", "rating": 4.1, "duration_hours": 14, "published_on": "2024-10-05"},
    {"slug": "physics-of-motion", "title": "Physics of Motion", "category": "stem", "level": "intermediate", "price": "400.00", "rating": 4.6, "duration_hours": 24, "published_on": "2024-12-01"},
    {"slug": "creative-writing", "title": "Creative Writing", "category": "language", "level": "beginner", "price": "150.00", "rating": 4.0, "duration_hours": 10, "published_on": "2024-08-22"},
    {"slug": "spanish-a1", "title": "Spanish A1", "category": "language", "level": "beginner", "price": "180.00", "rating": 4.5, "duration_hours": 18, "published_on": "2025-02-14"},
    {"slug": "data-science-intro", "title": "Data Science Intro", "category": "programming", "level": "advanced", "price": "2000.00", "rating": 4.9, "duration_hours": 60, "published_on": "2025-06-01"},
]
