"""In-memory stand-in for the supabase-py client used by the service tests."""

from types import SimpleNamespace

from postgrest.exceptions import APIError


def response(data=None, count=None):
    return SimpleNamespace(data=data if data is not None else [], count=count)


def api_error(message, code=None):
    return APIError({"message": message, "code": code, "hint": None, "details": None})


class FakeQuery:
    """Records a builder chain such as ``table(...).select(...).eq(...)``."""

    def __init__(self, db, target):
        self.db = db
        self.target = target
        self.calls = []

    def __getattr__(self, name):
        def record(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return record

    def execute(self):
        self.db.executed.append(self)
        result = self.db.next_result(self.target)
        if isinstance(result, Exception):
            raise result
        return result

    def call(self, name):
        for call_name, args, kwargs in self.calls:
            if call_name == name:
                return args, kwargs
        return None

    def filters(self):
        return {args[0]: args[1] for name, args, _ in self.calls if name in ("eq", "in_")}


class FakeSupabase:
    """
    Canned responses are queued per table (or ``rpc/<name>``); the last one
    queued keeps answering once the others are used up.
    """

    def __init__(self):
        self.results = {}
        self.executed = []

    def respond(self, target, *results):
        self.results.setdefault(target, []).extend(results)

    def next_result(self, target):
        queue = self.results.get(target)
        if not queue:
            return response()
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, function, params=None):
        query = FakeQuery(self, f"rpc/{function}")
        query.calls.append(("rpc", (function, params), {}))
        return query

    def queries(self, target, action=None):
        return [
            query
            for query in self.executed
            if query.target == target and (action is None or query.call(action))
        ]
