"""
Synexa-SIS - Test Configuration and Fixtures
"""
import os
import tempfile
from datetime import date
from typing import AsyncGenerator
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['STORAGE_PATH'] = tempfile.mkdtemp(prefix='synexa-test-')

from synexa.main import app
from synexa.core.database import Base, get_db
from synexa.core.security import get_password_hash, create_access_token, token_payload_for
from synexa.models import (
    User, UserRole, Teacher, SchoolClass, Shift, Subject, Student, Gender,
    Enrollment, EnrollmentStatus,
)

fake = Faker('pt_PT')

TEST_PASSWORD = 'testpassword123'

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


def auth_headers_for(user: User) -> dict:
    """Bearer header carrying an access token for ``user``"""
    token = create_access_token(token_payload_for(user))
    return {'Authorization': f'Bearer {token}'}


async def create_user(db: AsyncSession, role: UserRole, **overrides) -> User:
    user = User(
        name=overrides.pop('name', fake.name()),
        email=overrides.pop('email', fake.unique.email()),
        hashed_password=get_password_hash(overrides.pop('password', TEST_PASSWORD)),
        role=role,
        is_active=overrides.pop('is_active', True),
        **overrides
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def create_student(db: AsyncSession, school_class: SchoolClass = None, **overrides) -> Student:
    student = Student(
        first_name=overrides.pop('first_name', fake.first_name()),
        last_name=overrides.pop('last_name', fake.last_name()),
        gender=overrides.pop('gender', Gender.FEMININO),
        birth_date=overrides.pop('birth_date', date(2012, 5, 17)),
        student_number=overrides.pop(
            'student_number', f"AL{fake.unique.random_number(digits=8, fix_len=True)}"
        ),
        academic_year=overrides.pop('academic_year', str(date.today().year)),
        class_id=school_class.id if school_class else None,
        guardian_name=overrides.pop('guardian_name', fake.name()),
        guardian_phone=overrides.pop('guardian_phone', '923456789'),
        municipality='Belas',
        province='Luanda',
        **overrides
    )
    db.add(student)
    await db.commit()
    await db.refresh(student)
    return student


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create an admin test user"""
    return await create_user(db_session, UserRole.ADMIN)


@pytest.fixture
async def secretaria_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, UserRole.SECRETARIA)


@pytest.fixture
async def diretor_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, UserRole.DIRETOR)


@pytest.fixture
async def professor_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, UserRole.PROFESSOR)


@pytest.fixture
async def parent_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, UserRole.PARENT)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return auth_headers_for(admin_user)


@pytest.fixture
def secretaria_headers(secretaria_user: User) -> dict:
    return auth_headers_for(secretaria_user)


@pytest.fixture
def diretor_headers(diretor_user: User) -> dict:
    return auth_headers_for(diretor_user)


@pytest.fixture
def professor_headers(professor_user: User) -> dict:
    return auth_headers_for(professor_user)


@pytest.fixture
def parent_headers(parent_user: User) -> dict:
    return auth_headers_for(parent_user)


@pytest.fixture
async def teacher(db_session: AsyncSession, professor_user: User) -> Teacher:
    """Teaching profile for the professor user"""
    profile = Teacher(user_id=professor_user.id, bio="Professor de Matemática")
    db_session.add(profile)
    await db_session.commit()
    await db_session.refresh(profile)
    return profile


@pytest.fixture
async def school_class(db_session: AsyncSession) -> SchoolClass:
    turma = SchoolClass(
        name="7ª Classe A",
        year=date.today().year,
        shift=Shift.MORNING,
        capacity=30,
    )
    db_session.add(turma)
    await db_session.commit()
    await db_session.refresh(turma)
    return turma


@pytest.fixture
async def subject(db_session: AsyncSession) -> Subject:
    disciplina = Subject(name="Matemática", description="Matemática geral")
    db_session.add(disciplina)
    await db_session.commit()
    await db_session.refresh(disciplina)
    return disciplina


@pytest.fixture
async def student(db_session: AsyncSession, school_class: SchoolClass) -> Student:
    return await create_student(db_session, school_class, first_name="Ana", last_name="Silva")


@pytest.fixture
async def enrolled_student(db_session: AsyncSession, student: Student, school_class: SchoolClass) -> Student:
    """Student with an ACTIVE enrollment in ``school_class`` for the current year"""
    db_session.add(Enrollment(
        student_id=student.id,
        class_id=school_class.id,
        year=school_class.year,
        status=EnrollmentStatus.ACTIVE,
    ))
    await db_session.commit()
    return student


@pytest.fixture
async def parent_with_child(db_session: AsyncSession, parent_user: User, student: Student) -> User:
    """Parent linked to ``student``"""
    from synexa.models import parent_students

    await db_session.execute(
        parent_students.insert().values(parent_id=parent_user.id, student_id=student.id)
    )
    await db_session.commit()
    return parent_user


@pytest.fixture
async def assigned_teacher(db_session: AsyncSession, teacher: Teacher, subject: Subject, school_class: SchoolClass) -> Teacher:
    """Teacher who teaches ``subject`` to ``school_class``"""
    from synexa.models import subject_teachers, class_teachers

    await db_session.execute(subject_teachers.insert().values(subject_id=subject.id, teacher_id=teacher.id))
    await db_session.execute(class_teachers.insert().values(class_id=school_class.id, teacher_id=teacher.id))
    await db_session.commit()
    return teacher


async def add_grades(db: AsyncSession, student, subject, teacher, school_class, term: int, **values) -> None:
    """Insert grade rows directly, e.g. ``add_grades(..., term=1, MAC=12, NPP=14, NPT=13)``"""
    from synexa.models import Grade, GradeType

    for grade_type, value in values.items():
        db.add(Grade(
            student_id=student.id,
            subject_id=subject.id,
            teacher_id=teacher.id,
            class_id=school_class.id,
            type=GradeType(grade_type),
            term=term,
            year=school_class.year,
            value=value,
        ))
    await db.commit()
