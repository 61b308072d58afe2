"""
Seed data script for the Academy backend.
Creates sample data for testing and demonstration.
"""
from database import (
    get_db_context, init_db,
    User, Grade, Teacher, TeacherImage, Group, Student, StudentGroup, Registration, Program,
)
from services.passwords import hash_password

DEMO_PASSWORD = "academy123"


def seed_database():
    """Populate database with sample data."""

    with get_db_context() as db:
        # Clear existing data
        db.query(Registration).delete()
        db.query(StudentGroup).delete()
        db.query(Student).delete()
        db.query(Group).delete()
        db.query(Program).delete()
        db.query(TeacherImage).delete()
        db.query(Teacher).delete()
        db.query(Grade).delete()
        db.query(User).delete()

        digest = hash_password(DEMO_PASSWORD)

        # Create administrative users
        users = [
            User(full_name="Head Office", email="superadmin@academy.test",
                 password_digest=digest, role="superadmin"),
            User(full_name="Front Desk", email="admin@academy.test",
                 password_digest=digest, role="admin"),
        ]
        db.add_all(users)

        # Create grades
        grades = [Grade(name="7th"), Grade(name="8th"), Grade(name="9th")]
        db.add_all(grades)
        db.flush()

        # Create teachers
        teachers = [
            Teacher(full_name="Karim Haddad", email="karim@academy.test", password_digest=digest,
                    subjects_taught=["Math", "Physics"], degree="MSc Mathematics"),
            Teacher(full_name="Leila Mansour", email="leila@academy.test", password_digest=digest,
                    subjects_taught=["English"], bio="Ten years of language teaching."),
        ]
        db.add_all(teachers)
        db.flush()

        # Create groups; every subject is one its teacher teaches
        groups = [
            Group(name="Math 7A", teacher_id=teachers[0].id, subject="Math", grade_id=grades[0].id,
                  schedule_day="Monday", schedule_starting_time="16:00", schedule_ending_time="17:30"),
            Group(name="Physics 9A", teacher_id=teachers[0].id, subject="Physics", grade_id=grades[2].id,
                  schedule_day="Wednesday", schedule_starting_time="17:00", schedule_ending_time="18:30"),
            Group(name="English 7B", teacher_id=teachers[1].id, subject="English", grade_id=grades[0].id,
                  schedule_day="Saturday", schedule_starting_time="10:00", schedule_ending_time="11:30"),
        ]
        db.add_all(groups)
        db.flush()

        # Create students; each joins groups of its own grade
        students = [
            Student(first_name="Omar", last_name="Khalil", parent_name="Samir Khalil",
                    parent_email="samir@example.test", parent_phone="0600000001", grade_id=grades[0].id),
            Student(first_name="Nour", last_name="Saleh", parent_name="Rania Saleh",
                    parent_email="rania@example.test", grade_id=grades[0].id),
            Student(first_name="Yusuf", last_name="Amin", parent_name="Hana Amin",
                    parent_email="hana@example.test", grade_id=grades[2].id),
        ]
        students[0].enrollments = [StudentGroup(group_id=groups[0].id)]
        students[1].enrollments = [StudentGroup(group_id=groups[2].id)]
        students[2].enrollments = [StudentGroup(group_id=groups[1].id)]
        db.add_all(students)

        programs = [
            Program(name="Brevet preparation", year_level_id=grades[2].id),
        ]
        db.add_all(programs)

        registrations = [
            Registration(student_first_name="Lina", student_last_name="Fares", student_grade="7th",
                         parent_name="Ziad Fares", parent_email="ziad@example.test", group_id=groups[0].id),
        ]
        db.add_all(registrations)
        db.commit()

        print("Database seeded successfully!")
        print(f"Created:")
        print(f"  - {len(users)} administrative users")
        print(f"  - {len(grades)} grades")
        print(f"  - {len(teachers)} teachers")
        print(f"  - {len(groups)} groups")
        print(f"  - {len(students)} students")
        print(f"  - {len(programs)} programs")
        print(f"  - {len(registrations)} registrations")

        # Print login emails for reference
        print(f"\nLogins (password '{DEMO_PASSWORD}'):")
        print(f"  Staff: {[u.email for u in users]}")
        print(f"  Teachers: {[t.email for t in teachers]}")


if __name__ == "__main__":
    print("Initializing database...")
    init_db()
    print("Seeding database...")
    seed_database()
