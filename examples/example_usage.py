"""Example: drive the service layer directly (no Flask).

Controllers are a thin layer; the attendance rules live in the services.
"""

import importlib

from config import get_settings_module

from presence_tracking.container import build_container
from presence_tracking.core.enums import Role
from presence_tracking.core.identity import Caller


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, attendance_config=settings.ATTENDANCE_CONFIG)

    caller = Caller(identifier="asha@example.com", role=Role.EMPLOYEE)
    result = container.attendance_service.auto_geo_check_in(caller, 18.433, 73.887)
    print(result.to_dict())

    for view in container.attendance_query.list_all()[:5]:
        print(view.to_dict())


if __name__ == "__main__":
    main()
