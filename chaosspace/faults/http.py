"""
HTTP request and response faults. Every record targets one entry of the
flattened HTTP endpoint list (see SystemCache.get_all_endpoints).
"""
from chaosspace.faults.common import duration_field, system_field
from chaosspace.schema.fields import IntField
from chaosspace.schema.record import Record

# Indexed by HTTPRequestReplaceMethod.replace_method
HTTP_METHODS = ('GET', 'POST', 'PUT', 'DELETE', 'HEAD', 'OPTIONS', 'PATCH')

# Indexed by HTTPResponseReplaceCode.status_code
HTTP_STATUS_CODES = (400, 401, 403, 404, 405, 408, 500, 502, 503, 504)


def _endpoint_fields(*extra):
    return [
        duration_field(),
        system_field(),
        IntField('endpoint_idx', dynamic=True,
                 description="Flattened HTTP Endpoint Index"),
    ] + list(extra)


def _delay_field():
    return IntField('delay_duration', '10-5000',
                    description="Delay in milliseconds")


class HTTPRequestAbort(Record):

    @classmethod
    def schema(cls):
        return _endpoint_fields()


class HTTPResponseAbort(Record):

    @classmethod
    def schema(cls):
        return _endpoint_fields()


class HTTPRequestDelay(Record):

    @classmethod
    def schema(cls):
        return _endpoint_fields(_delay_field())


class HTTPResponseDelay(Record):

    @classmethod
    def schema(cls):
        return _endpoint_fields(_delay_field())


class HTTPResponseReplaceBody(Record):

    @classmethod
    def schema(cls):
        return _endpoint_fields(
            IntField('body_type', '0-1',
                     description="Body Type (0=Empty, 1=Random)"))


class HTTPResponsePatchBody(Record):

    @classmethod
    def schema(cls):
        return _endpoint_fields()


class HTTPRequestReplacePath(Record):

    @classmethod
    def schema(cls):
        return _endpoint_fields()


class HTTPRequestReplaceMethod(Record):

    @classmethod
    def schema(cls):
        return _endpoint_fields(
            IntField('replace_method', '0-6',
                     description="HTTP Method index (filtered, excluding "
                                 "original method)"))


class HTTPResponseReplaceCode(Record):

    @classmethod
    def schema(cls):
        return _endpoint_fields(
            IntField('status_code', '0-9',
                     description="HTTP Status Code to replace with"))
