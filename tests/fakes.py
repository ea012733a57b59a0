from __future__ import annotations

from dataclasses import replace

from src.hr_performance_system.hr_performance_system.core.enums import ChargeStatus


class FakeChargesRepo:
    def __init__(self, existing=None):
        self.charges = list(existing or [])
        self.count_calls = []
        self._next_id = 1

    def count_since(self, *, employee_id, charge_types, since):
        types = set(charge_types)
        self.count_calls.append((employee_id, types, since))
        return sum(
            1
            for c in self.charges
            if c.employee_id == employee_id and c.charge_type in types and c.charge_date >= since
        )

    def exists(self, *, employee_id, charge_date, charge_type):
        return any(
            c.employee_id == employee_id and c.charge_date == charge_date and c.charge_type == charge_type
            for c in self.charges
        )

    def insert(self, charge):
        saved = replace(charge, charge_id=f"c{self._next_id}")
        self._next_id += 1
        self.charges.append(saved)
        return saved

    def get_by_id(self, charge_id):
        for c in self.charges:
            if c.charge_id == charge_id:
                return c
        return None

    def update_status(self, *, charge_id, status, decided_at, waived_by=None, waiver_reason=None, dispute_resolution=None):
        for i, c in enumerate(self.charges):
            if c.charge_id == charge_id and c.status == ChargeStatus.PENDING:
                self.charges[i] = replace(
                    c,
                    status=status,
                    waived_by=waived_by,
                    waiver_reason=waiver_reason,
                    waived_at=decided_at if waiver_reason else None,
                    dispute_resolution=dispute_resolution,
                    resolved_at=decided_at if dispute_resolution else None,
                )
                return True
        return False

    def list_between(self, *, start_date, end_date, status=None):
        return [
            c
            for c in self.charges
            if start_date <= c.charge_date <= end_date and (status is None or c.status == status)
        ]


class FakeEscalationRulesRepo:
    def __init__(self, rules=None):
        self.rules = {r.rule_id: r for r in (rules or [])}
        self._next_id = 1

    def get_active(self, violation_type):
        for r in self.rules.values():
            if r.violation_type == violation_type and r.is_active:
                return r
        return None

    def list_all(self):
        return list(self.rules.values())

    def get_by_id(self, rule_id):
        return self.rules.get(rule_id)

    def create(self, rule):
        rule_id = f"r{self._next_id}"
        self._next_id += 1
        self.rules[rule_id] = replace(rule, rule_id=rule_id)
        return rule_id

    def update(self, rule):
        if rule.rule_id not in self.rules:
            return False
        self.rules[rule.rule_id] = rule
        return True

    def delete(self, rule_id):
        return self.rules.pop(rule_id, None) is not None

    def deactivate_others(self, *, violation_type, keep_rule_id):
        n = 0
        for rid, r in list(self.rules.items()):
            if rid != keep_rule_id and r.violation_type == violation_type and r.is_active:
                self.rules[rid] = replace(r, is_active=False)
                n += 1
        return n


class FakeNotifications:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    def send(self, request):
        if self.fail:
            raise RuntimeError("notifications table unavailable")
        self.sent.append(request)


class FakeEmployees:
    def __init__(self, employees):
        self.employees = list(employees)

    def list_active(self):
        return [e for e in self.employees if e.is_active]


class FakeAttendanceRepo:
    def __init__(self, logs=None):
        self.logs = {log.log_id: log for log in (logs or [])}
        self.closed = []
        self.fail_for = set()

    def get_for_employee_and_date(self, employee_id, work_date):
        if employee_id in self.fail_for:
            raise RuntimeError("attendance_logs unreadable")
        matches = [
            log
            for log in self.logs.values()
            if log.employee_id == employee_id and log.clock_in_time.date() == work_date
        ]
        return max(matches, key=lambda log: log.clock_in_time) if matches else None

    def list_open_office_sessions(self):
        # Location and overtime filtering is left to the caller here.
        return [log for log in self.logs.values() if log.is_open]

    def close_session(self, *, log_id, clock_out_time, total_hours, early_closure, auto_clocked_out):
        log = self.logs[log_id]
        if log.employee_id in self.fail_for:
            raise RuntimeError("deadlock found when trying to get lock")
        if not log.is_open:
            return False
        self.logs[log_id] = replace(
            log,
            clock_out_time=clock_out_time,
            total_hours=total_hours,
            early_closure=early_closure,
            auto_clocked_out=auto_clocked_out,
        )
        self.closed.append(log_id)
        return True


class FakeAttendanceRules:
    def __init__(self, rule):
        self.rule = rule

    def get_active(self):
        return self.rule
