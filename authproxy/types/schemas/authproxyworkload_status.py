from marshmallow import fields
from authproxy.types.base import BaseSchema
from authproxy.types.schemas.condition import ConditionSchema
from authproxy.types.models.authproxyworkload_status import (
    WorkloadStatus,
    AuthProxyWorkloadStatus,
)


class WorkloadStatusSchema(BaseSchema):
    __model__ = WorkloadStatus

    kind = fields.String(data_key="kind", required=True)
    version = fields.String(data_key="version", required=True)
    namespace = fields.String(data_key="namespace", load_default="")
    name = fields.String(data_key="name", required=True)
    conditions = fields.List(
        fields.Nested(ConditionSchema()), data_key="conditions", load_default=list
    )


class AuthProxyWorkloadStatusSchema(BaseSchema):
    __model__ = AuthProxyWorkloadStatus

    conditions = fields.List(
        fields.Nested(ConditionSchema()), data_key="conditions", load_default=list
    )
    workload_statuses = fields.List(
        fields.Nested(WorkloadStatusSchema()),
        data_key="workloadStatuses",
        load_default=list,
    )
