from yaspin.core import Yaspin


class ResultSpinner(Yaspin):
    """Spinner that ends with a check mark, or a cross when the block raised."""

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            self.ok("✅")
        else:
            self.fail("❌")
        return super().__exit__(exc_type, exc_value, traceback)


def spinner(text: str = "", **kwargs) -> ResultSpinner:
    return ResultSpinner(text=text, timer=True, **kwargs)
