# user_accounts/app.py
from socketserver import ThreadingMixIn
from wsgiref.simple_server import WSGIServer, make_server
import json
import logging
import os
import re
import sys

from user_accounts.database import Database, DEFAULT_DATABASE_URL
from user_accounts.database.db_init import initialize_db
from user_accounts.repositories.sqlalchemy import SqlalchemyNoteRepository, SqlalchemyUserRepository
from user_accounts.services.user_service import UserService
from user_accounts.services.exceptions import (
    ConstraintViolationError, DuplicateUsernameError, NoUsersFoundError,
    UserCreationError, UserHasNotesError, UserNotFoundError, UserValidationError
)

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------
## 요청 처리 유틸리티 함수
# --------------------------------------------------------------------------

def get_request_data(environ):
    try:
        content_length = int(environ.get("CONTENT_LENGTH") or 0)
        data = json.loads(environ["wsgi.input"].read(content_length)) if content_length > 0 else {}
    except (ValueError, json.JSONDecodeError):
        raise UserValidationError("Invalid or missing JSON body.")
    if not isinstance(data, dict):
        raise UserValidationError("Invalid or missing JSON body.")
    return data

ERROR_MAP = {
    UserValidationError: "400 Bad Request",
    NoUsersFoundError: "400 Bad Request",
    UserCreationError: "400 Bad Request",
    UserNotFoundError: "404 Not Found",
    DuplicateUsernameError: "409 Conflict",
    UserHasNotesError: "409 Conflict",
    ConstraintViolationError: "409 Conflict",
}

def handle_exception(e):
    status = ERROR_MAP.get(type(e))
    if status is None:
        logger.exception("Unhandled error while processing request")
        return "500 Internal Server Error", json.dumps({"message": "Internal server error"})
    return status, json.dumps({"message": str(e)})

# --------------------------------------------------------------------------
## 핸들러 함수
# --------------------------------------------------------------------------

def list_users_handler(environ):
    users = environ['services']['users'].list_users()
    return '200 OK', json.dumps({"users": users})

def create_user_handler(environ):
    data = get_request_data(environ)
    result = environ['services']['users'].create_user(
        data.get('username'), data.get('password'), data.get('roles')
    )
    return '201 Created', json.dumps({"message": result["message"]})

def update_user_handler(environ):
    data = get_request_data(environ)
    result = environ['services']['users'].update_user(
        data.get('id'), data.get('username'), data.get('roles'), data.get('active'), data.get('password')
    )
    return '200 OK', json.dumps({"message": result["message"]})

def delete_user_handler(environ):
    data = get_request_data(environ)
    result = environ['services']['users'].delete_user(data.get('id'))
    return '200 OK', json.dumps({"message": result["message"]})

ROUTES = [
    ('GET', r'^/users/?$', list_users_handler),
    ('POST', r'^/users/?$', create_user_handler),
    ('PATCH', r'^/users/?$', update_user_handler),
    ('DELETE', r'^/users/?$', delete_user_handler),
]

# --------------------------------------------------------------------------
## WSGI 애플리케이션 (의존성 주입 및 라우팅)
# --------------------------------------------------------------------------

def create_app(database: Database, hash_rounds=None):
    """
    주어진 저장소 핸들을 사용하는 WSGI 애플리케이션을 생성합니다.
    요청마다 세션을 새로 열고, 리포지토리와 서비스를 조립한 뒤 요청이 끝나면 세션을 닫습니다.
    """
    service_kwargs = {} if hash_rounds is None else {"hash_rounds": hash_rounds}

    def application(environ, start_response):
        db_session = database.session()
        try:
            # 1. 의존성 생성 (Repositories -> Services)
            user_repo = SqlalchemyUserRepository(db_session)
            note_repo = SqlalchemyNoteRepository(db_session)
            environ['services'] = {'users': UserService(user_repo, note_repo, **service_kwargs)}

            # 2. 라우팅 및 핸들러 실행
            path = environ.get("PATH_INFO", "")
            method = environ.get("REQUEST_METHOD", "")

            handler = None
            for route_method, pattern, route_handler in ROUTES:
                if method == route_method and re.match(pattern, path):
                    handler = route_handler
                    break

            if handler:
                status, response_body = handler(environ)
            else:
                status, response_body = '404 Not Found', json.dumps({'message': 'Not Found'})

        except Exception as e:
            db_session.rollback()
            status, response_body = handle_exception(e)
        finally:
            db_session.close()

        start_response(status, [("Content-Type", "application/json")])
        return [response_body.encode("utf-8")]

    return application

# --------------------------------------------------------------------------
## 서버 실행
# --------------------------------------------------------------------------

class ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """요청마다 스레드를 사용하여 bcrypt 해시 계산이 다른 요청을 막지 않도록 합니다."""
    daemon_threads = True


def main(database_url: str = DEFAULT_DATABASE_URL):
    logging.basicConfig(
        level=os.environ.get("USER_ACCOUNTS_LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    database = Database(database_url)
    if database.is_in_memory:
        # 인메모리 DB는 하나의 연결을 공유하므로 스레드 서버에서 사용할 수 없습니다.
        logger.error("Refusing to serve in-memory database %s; set USER_ACCOUNTS_DATABASE_URL", database_url)
        database.dispose()
        sys.exit(1)
    port = int(os.environ.get("USER_ACCOUNTS_PORT", 8000))
    initialize_db(database)
    try:
        with make_server("", port, create_app(database), server_class=ThreadingWSGIServer) as httpd:
            logger.info("Serving user accounts service on port %s...", port)
            httpd.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down.")
    except Exception:
        logger.exception("Error starting server")
        sys.exit(1)
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
