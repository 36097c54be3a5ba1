"""
Field declarations shared by every fault record.
"""
from chaosspace.schema.fields import IntField


def duration_field():
    return IntField('duration', '1-60', description="Time Unit Minute")


def system_field():
    return IntField('system', dynamic=True,
                    description="Target system index")


def network_fields(name, description, correlation=True):
    """
    Direction-aware network impairment parameters: the percentage of
    affected packets, an optional correlation and the direction.
    """
    fields = [IntField(name, '1-100', description=description)]
    if correlation:
        fields.append(IntField('correlation', '0-100',
                               description="Correlation percentage"))
    fields.append(direction_field())
    return fields


def direction_field():
    return IntField('direction', '1-3',
                    description="Direction (1=to, 2=from, 3=both)")
