"""
Integration tests: a ModelAutomation walking a small application model.

The application is an in-memory fake with a login form and a dashboard.
The automation builds an FSM over it, walks a fixed route and asserts on
what it sees, then a batch runs several walks side by side.
"""

from __future__ import annotations

from ladon.automator.batch import BatchAutomation, BatchEntry
from ladon.automator.flags import Flag
from ladon.automator.model_automation import ModelAutomation
from ladon.modeler.contexts import Context, ModelContext
from ladon.modeler.fsm import FiniteStateMachine
from ladon.modeler.load_strategy import LoadStrategy
from ladon.modeler.state import State
from ladon.modeler.transition import Transition
from ladon.primitives.common import ResultStatus


class FakeApp:
    def __init__(self, password: str = "hunter2") -> None:
        self.password = password
        self.session: str | None = None
        self.requests: list[str] = []

    def login(self, password: str) -> None:
        self.requests.append("POST /login")
        if password == self.password:
            self.session = "token"

    def logout(self) -> None:
        self.requests.append("POST /logout")
        self.session = None


def _submit_login(state):
    state.context["app"].login(state.context["credentials"])


class LoginForm(State):
    @classmethod
    def transitions(cls):
        submit = Transition.to(Dashboard, metadata={"action": "login"})
        submit.by(_submit_login)
        return [submit]


class Dashboard(State):
    @classmethod
    def transitions(cls):
        leave = Transition.to(LoginForm.state_name, metadata={"action": "logout"})
        leave.when(lambda s: s.context["app"].session is not None)
        leave.by(lambda s: s.context["app"].logout())
        return [leave]


class RouteFSM(FiniteStateMachine):
    """Takes the first valid transition, which the route filter narrows to one."""

    def selection_strategy(self, options):
        return options[0] if len(options) == 1 else None


class LoginWalk(ModelAutomation):
    PASSWORD = Flag("password", default="hunter2")
    ROUTE = ("login", "logout", "login")

    def build_model(self):
        self.app = FakeApp()
        context = ModelContext(
            [
                Context("app", self.app),
                Context("credentials", self.flag_value(self.PASSWORD)),
            ]
        )
        self.model = RouteFSM(self.config, context)
        self.model.use_state_type(LoginForm, LoadStrategy.EAGER)

    def execute(self):
        visited = [type(self.model.current_state).__name__]
        for action in self.ROUTE:
            self.model.make_transition(lambda t, a=action: t.meta_for("action") == a)
            visited.append(type(self.model.current_state).__name__)
            if action == "login":
                self.halting_assert("login opens a session", lambda: self.app.session == "token")
        self.result.record_data("visited", visited)

    def teardown(self):
        self.result.record_data("requests", list(self.app.requests))


class TestLoginWalk:
    def test_successful_walk(self):
        automation = LoginWalk.spawn(flags={"log_echo": False})
        result = automation.run()

        assert result.status is ResultStatus.SUCCESS
        assert result.data_log["visited"] == ["LoginForm", "Dashboard", "LoginForm", "Dashboard"]
        assert result.data_log["requests"] == ["POST /login", "POST /logout", "POST /login"]
        assert automation.model.states == {LoginForm, Dashboard}

    def test_wrong_password_halts_execute(self):
        automation = LoginWalk.spawn(flags={"log_echo": False, "password": "guess"})
        result = automation.run()

        assert result.status is ResultStatus.ERROR
        assert "visited" not in result.data_log
        assert "requests" not in result.data_log
        assert automation.app.requests == ["POST /login"]
        assert isinstance(automation.model.current_state, Dashboard)

    def test_blocked_transition_is_an_error(self):
        automation = LoginWalk.spawn(flags={"log_echo": False})
        automation.run(to_index=4)
        automation.app.session = None
        automation.model.use_state_type(Dashboard)

        automation.sandbox("leave dashboard", automation.model.make_transition)

        assert automation.result.status is ResultStatus.ERROR
        assert automation.logger.entries[-1].msg_lines[0].startswith(
            "InvalidSelectionError in leave dashboard"
        )

    def test_result_serialises(self):
        result = LoginWalk.spawn(id="walk-1", flags={"log_echo": False}).run()
        dumped = result.to_dict()
        assert dumped["config"]["id"] == "walk-1"
        assert [t["name"] for t in dumped["timings"]] == [
            "build_model",
            "verify_model",
            "execute",
            "teardown",
        ]


class TestBatchOfWalks:
    def test_parallel_walks_are_isolated(self):
        batch = BatchAutomation.spawn(
            flags={
                "entries": [
                    BatchEntry(LoginWalk, flags={"log_echo": False}, repeats=3),
                    BatchEntry("LoginWalk", flags={"log_echo": False, "password": "nope"}),
                ],
                "run_delay": 0,
                "log_echo": False,
            }
        )
        result = batch.run()

        assert result.status is ResultStatus.FAILURE
        assert result.data_log["SUCCESS"] == 3
        assert result.data_log["ERROR"] == 1
        apps = {id(instance.app) for instance in batch.instances}
        assert len(apps) == 4
