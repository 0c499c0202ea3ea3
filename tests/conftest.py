import pytest


SAMPLE_PAGE = """<html>
<head><title>
  Stundenplan WS 2019/20
</title></head>
<body>
<form>
  <select name="year">
    <option value="2019">2019</option>
    <option value="2020" selected>2020</option>
  </select>
</form>
<div class="calendar">
<table class="week_table"><tbody>
  <tr>
    <th class="week_number">KW 6</th>
    <td class="week_header"><nobr>Mo 3.2.</nobr></td>
  </tr>
  <tr>
    <td class="week_block">
      <span class="resource">Prof. Dr. Example</span>
      <a href="#">09:00&nbsp;-10:30<br>Algorithms &amp; Data Structures</a>
      <span class="resource">Room 101</span>
    </td>
  </tr>
</tbody></table>
</div>
</body>
</html>
"""


@pytest.fixture
def sample_page() -> str:
    """One week (KW 6, Monday 3.2., year 2020) with a single session."""
    return SAMPLE_PAGE
