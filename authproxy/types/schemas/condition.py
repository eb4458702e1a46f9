from marshmallow import fields, validate
from authproxy.types.base import BaseSchema
from authproxy.types.models.condition import Condition, ConditionStatus


class ConditionSchema(BaseSchema):
    __model__ = Condition

    type = fields.String(data_key="type", required=True)
    status = fields.String(
        data_key="status",
        required=True,
        validate=validate.OneOf(
            [ConditionStatus.TRUE, ConditionStatus.FALSE, ConditionStatus.UNKNOWN]
        ),
    )
    observed_generation = fields.Integer(
        data_key="observedGeneration", allow_none=True, load_default=None
    )
    reason = fields.String(data_key="reason", allow_none=True, load_default=None)
    message = fields.String(data_key="message", allow_none=True, load_default=None)
    last_transition_time = fields.String(
        data_key="lastTransitionTime", allow_none=True, load_default=None
    )
