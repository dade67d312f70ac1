"""Claim races run against a file-backed SQLite database with one session per
technician, the way concurrent requests each get their own scoped session."""
import threading
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from repairdesk.constants.roles import ROLE_TECHNICIAN
from repairdesk.errors import AlreadyClaimed
from repairdesk.models.user import Base, User
from repairdesk.models.work_order import WorkOrder
from repairdesk.services import orders as engine_svc


@pytest.fixture()
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'claims.db'}", future=True,
                           connect_args={'check_same_thread': False, 'timeout': 30})
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
    yield factory
    engine.dispose()


def _seed(factory, n_techs=2):
    with factory() as s:
        techs = [User(email=f't{i}@example.com', first_name=f'Tech{i}', last_name='X', role=ROLE_TECHNICIAN) for i in range(n_techs)]
        s.add_all(techs)
        s.commit()
        order = engine_svc.create_order('Redmi Note 7', 'no enciende', 'A-8', created_by='admin', session=s)
        return [t.id for t in techs], order.id


def test_stale_reader_cannot_claim(session_factory):
    (t1, t2), oid = _seed(session_factory)
    s1, s2 = session_factory(), session_factory()
    try:
        # Both technicians saw the order as pending
        assert s1.get(WorkOrder, oid).status == WorkOrder.STATUS_PENDING
        assert s2.get(WorkOrder, oid).status == WorkOrder.STATUS_PENDING
        won = engine_svc.claim_order(oid, t1, session=s1)
        assert won.assigned_technician_id == t1
        with pytest.raises(AlreadyClaimed):
            engine_svc.claim_order(oid, t2, session=s2)
    finally:
        s1.close(); s2.close()
    with session_factory() as s:
        stored = s.get(WorkOrder, oid)
        assert stored.status == WorkOrder.STATUS_WORKING
        assert stored.assigned_technician_id == t1
        assert stored.assigned_technician_name == 'Tech0 X'


def test_concurrent_claims_have_one_winner(session_factory):
    techs, oid = _seed(session_factory, n_techs=4)
    barrier = threading.Barrier(len(techs))
    outcomes = {}

    def claim(tech_id):
        session = session_factory()
        try:
            barrier.wait()
            engine_svc.claim_order(oid, tech_id, session=session)
            outcomes[tech_id] = 'won'
        except AlreadyClaimed:
            outcomes[tech_id] = 'lost'
        except Exception as e:  # surfaced through the assertions below
            outcomes[tech_id] = repr(e)
        finally:
            session.close()

    threads = [threading.Thread(target=claim, args=(t,)) for t in techs]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    winners = [t for t, r in outcomes.items() if r == 'won']
    losers = [t for t, r in outcomes.items() if r == 'lost']
    assert len(winners) == 1, outcomes
    assert len(losers) == len(techs) - 1, outcomes
    with session_factory() as s:
        stored = s.get(WorkOrder, oid)
        assert stored.assigned_technician_id == winners[0]
        assert stored.status == WorkOrder.STATUS_WORKING


def test_claim_missing_technician_uses_placeholder(session_factory):
    _, oid = _seed(session_factory)
    with session_factory() as s:
        view = engine_svc.claim_order(oid, 'not-a-user', session=s)
    assert view.assigned_technician_name == 'Unknown'
