from rest_framework import serializers


class LabelChoiceField(serializers.ChoiceField):
    """
    Choice field for the review forms: "self", "Self" and "SELF" all map to
    the stored value; responses carry the label.
    """
    def to_internal_value(self, data):
        text = str(data)
        if text in self.choices:
            return text
        for key, label in self.choices.items():
            if str(label).lower() == text.lower() or str(key).lower() == text.lower():
                return key
        self.fail("invalid_choice", input=data)

    def to_representation(self, value):
        return self.choices.get(value, super().to_representation(value))


def validation_error_detail(error):
    """DRF-friendly detail out of a django.core.exceptions.ValidationError."""
    if hasattr(error, "error_dict"):
        return error.message_dict
    return {"error": error.messages}
