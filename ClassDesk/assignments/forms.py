# assignments/forms.py
from django import forms
from .models import Assignment

class AssignmentPublishForm(forms.ModelForm):
    class Meta:
        model = Assignment
        fields = ["name", "instructions", "draft"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # fields left out of the payload keep their current value
        for name in self.fields:
            if name not in self.data and self.instance is not None:
                self.data = {**self.data, name: getattr(self.instance, name)}

    def clean_name(self):
        name = (self.cleaned_data.get("name") or "").strip()
        # the name ends up in e-mail subjects
        if "\n" in name or "\r" in name:
            raise forms.ValidationError("The name must fit on one line.", code="multiline")
        return name

    def clean(self):
        cleaned = super().clean()
        if "name" not in self.errors and not cleaned.get("draft") and not cleaned.get("name"):
            self.add_error("name", "A published assignment needs a name.")
        return cleaned
