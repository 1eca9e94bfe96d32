class FilterableQuerysetMixin:
    """
    Mixin to provide common filtering functionality for querysets.
    Reduces code duplication in ViewSets that need query parameter filtering.
    """

    def get_queryset(self):
        """
        Returns filtered queryset based on query parameters.
        Override filter_fields in subclasses to specify which fields to filter.
        """
        qs = super().get_queryset()

        for field in getattr(self, 'filter_fields', []):
            value = self.request.query_params.get(field)
            if value:
                qs = qs.filter(**{f"{field}__iexact": value})

        return qs


class UserSpecificQuerysetMixin:
    """
    Mixin to provide user-specific queryset filtering.
    Ensures users can only access their own data, while admins can access all.
    """

    def get_queryset(self):
        """
        Returns queryset filtered by user ownership.
        Requires the model to have a 'user' field or similar relationship.
        """
        qs = super().get_queryset()

        # Admin can see all records
        if self.request.user.is_staff or self.request.user.is_superuser:
            return qs

        user_field = getattr(self, 'user_field', 'user')
        return qs.filter(**{user_field: self.request.user})


class OrderedQuerysetMixin:
    """
    Mixin to provide default ordering for querysets.
    """

    def get_queryset(self):
        """
        Returns ordered queryset based on default_ordering.
        Override default_ordering in subclasses to specify ordering.
        """
        qs = super().get_queryset()
        ordering = getattr(self, 'default_ordering', ['-created_at'])
        return qs.order_by(*ordering)


class UserFilterableQuerysetMixin(UserSpecificQuerysetMixin, FilterableQuerysetMixin, OrderedQuerysetMixin):
    """
    Combined mixin for user-specific views with filtering and ordering.
    """
